"""Cars app package.

Holds the fleet: the Car aggregate with its operational status machine
(available, rented, maintenance, retired), the ORM model it is stored
in and the fleet maintenance use cases.
"""
