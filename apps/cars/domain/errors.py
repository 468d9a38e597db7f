"""Car domain errors."""

from shared.domain.errors import (
    AlreadyExistsError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NotFoundError,
)


class CarNotAvailableError(InvalidStatusTransitionError):
    code = 'car_not_available'
    default_message = 'The car is not available.'


class CarRetiredError(InvalidStatusTransitionError):
    code = 'car_retired'
    default_message = 'The car is retired; no further status change is allowed.'


class InvalidLicensePlateError(InvalidInputError):
    code = 'invalid_license_plate'
    default_message = 'License plate may only contain A-Z, 0-9 and dashes.'


class InvalidCategoryError(InvalidInputError):
    code = 'invalid_category'
    default_message = 'Unknown car category.'


class CarNotFoundError(NotFoundError):
    code = 'car_not_found'
    default_message = 'Car not found.'


class LicensePlateAlreadyExistsError(AlreadyExistsError):
    code = 'license_plate_exists'
    default_message = 'A car with this license plate already exists.'
