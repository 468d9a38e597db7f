"""Customers app package.

Customers reserve and rent cars; a blocked customer cannot create new
reservations. Employee records share the same person validation but
are not persisted by this project.
"""
