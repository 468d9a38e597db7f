"""Customer and employee domain errors."""

from shared.domain.errors import (
    ConflictError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NotFoundError,
)


class InvalidEmailError(InvalidInputError):
    code = 'invalid_email'
    default_message = 'The email address has an invalid format.'


class CustomerNotFoundError(NotFoundError):
    code = 'customer_not_found'
    default_message = 'Customer not found.'


class CustomerAlreadyBlockedError(InvalidStatusTransitionError):
    code = 'customer_already_blocked'
    default_message = 'The customer is already blocked.'


class CustomerBlockedError(ConflictError):
    code = 'customer_blocked'
    default_message = 'The customer is blocked and cannot make reservations.'


class EmployeeAlreadyDeactivatedError(InvalidStatusTransitionError):
    code = 'employee_already_deactivated'
    default_message = 'The employee is already deactivated.'


class InvalidAdminRightsError(InvalidInputError):
    code = 'invalid_admin_rights'
    default_message = 'The admin rights contain unsupported flags.'
