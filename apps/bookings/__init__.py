"""Bookings app package.

This app encapsulates the booking lifecycle: reservations of a car
category for a period, their confirmation against category capacity,
the rental created when a concrete car is handed over and its return.
Every use case commits once through the unit of work; conflicting
confirmations and pick-ups are serialized by locking the category's
car rows.
"""
