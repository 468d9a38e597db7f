"""Booking domain errors."""

from shared.domain.errors import (
    AlreadyExistsError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)


class InvalidKmError(InvalidInputError):
    code = 'invalid_km'
    default_message = 'Odometer reading is invalid.'


class InvalidFuelLevelError(InvalidInputError):
    code = 'invalid_fuel_level'
    default_message = 'Fuel level must be between 0 and 100.'


class InvalidLimitError(InvalidInputError):
    code = 'invalid_limit'
    default_message = 'The limit must be greater than zero.'


class NoCategoryCapacityError(ConflictError):
    code = 'no_category_capacity'
    default_message = 'There are no operational cars in this category.'


class OverCapacityError(ConflictError):
    code = 'over_capacity'
    default_message = 'All cars of this category are already booked for the period.'


class NoCarAvailableError(ConflictError):
    code = 'no_car_available'
    default_message = 'No car of the reserved category is free for the period.'


class RentalAlreadyAssignedError(ConflictError):
    code = 'rental_already_assigned'
    default_message = 'The reservation is already linked to another rental.'


class ReservationNotFoundError(NotFoundError):
    code = 'reservation_not_found'
    default_message = 'Reservation not found.'


class RentalNotFoundError(NotFoundError):
    code = 'rental_not_found'
    default_message = 'Rental not found.'


class ReservationAlreadyExistsError(AlreadyExistsError):
    code = 'reservation_exists'
    default_message = 'A reservation with this id already exists.'


class RentalAlreadyExistsError(AlreadyExistsError):
    code = 'rental_exists'
    default_message = 'The reservation has already been picked up.'
