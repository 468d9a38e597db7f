"""
Domain Errors

Every expected business failure is raised as a DomainError subclass.
The error kinds mirror the outcomes a caller has to distinguish:

- InvalidInputError: malformed id, out-of-range field
- InvalidStatusTransitionError: operation not legal from the current state
- InvalidTimestampError: temporal ordering violated
- NotFoundError: aggregate does not exist
- ConflictError: capacity or overlap violation
- AlreadyExistsError: uniqueness violation

Each error also carries a stable `code` so callers can tell apart
errors of the same kind (e.g. `over_capacity` vs `no_category_capacity`).
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_INPUT = 'invalid_input'
    INVALID_STATUS_TRANSITION = 'invalid_status_transition'
    INVALID_TIMESTAMP = 'invalid_timestamp'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    ALREADY_EXISTS = 'already_exists'


class DomainError(ValueError):
    """Base class for business rule violations."""

    kind: ErrorKind
    code = 'domain_error'
    default_message = 'Domain rule violated.'

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class InvalidInputError(DomainError):
    kind = ErrorKind.INVALID_INPUT
    code = 'invalid_input'
    default_message = 'The provided input is invalid.'


class InvalidStatusTransitionError(DomainError):
    kind = ErrorKind.INVALID_STATUS_TRANSITION
    code = 'invalid_status_transition'
    default_message = 'The requested status transition is not allowed.'


class InvalidTimestampError(DomainError):
    kind = ErrorKind.INVALID_TIMESTAMP
    code = 'invalid_timestamp'
    default_message = 'The provided timestamp is invalid.'


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = 'not_found'
    default_message = 'The requested resource does not exist.'


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
    code = 'conflict'
    default_message = 'The operation conflicts with the current state.'


class AlreadyExistsError(DomainError):
    kind = ErrorKind.ALREADY_EXISTS
    code = 'already_exists'
    default_message = 'The resource already exists.'


class InvalidIdError(InvalidInputError):
    code = 'invalid_id'
    default_message = 'The provided id is not a valid UUID.'


class InvalidPeriodError(InvalidInputError):
    code = 'invalid_period'
    default_message = 'The period start must be before its end.'


class StartInPastError(InvalidTimestampError):
    code = 'start_in_past'
    default_message = 'The period must start in the future.'
