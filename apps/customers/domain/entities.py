"""
Customer Domain Entities

- validate_person_data: name and email rules shared by customers and employees
- Customer: a person who books cars
- Employee: a member of staff with optional administrative rights
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Flag

from shared.domain.base import Aggregate
from shared.domain.errors import InvalidInputError
from shared.domain.identifiers import resolve_id
from apps.customers.domain.errors import (
    CustomerAlreadyBlockedError,
    EmployeeAlreadyDeactivatedError,
    InvalidAdminRightsError,
    InvalidEmailError,
)
from apps.customers.domain.events import CustomerBlocked, CustomerRegistered

EMAIL_PATTERN = re.compile(r'^\S+@\S+\.\S+$')


def validate_person_data(first_name: str, last_name: str, email: str) -> tuple[str, str, str]:
    """
    Validate and normalize a person's name and email

    Returns the trimmed values; email is lower-cased.
    """
    first_name = (first_name or '').strip()
    last_name = (last_name or '').strip()
    email = (email or '').strip()

    if not first_name:
        raise InvalidInputError("First name is required", code='first_name_required')
    if not last_name:
        raise InvalidInputError("Last name is required", code='last_name_required')
    if not email:
        raise InvalidInputError("Email is required", code='email_required')
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmailError(f"Invalid email: {email!r}")

    return first_name, last_name, email.lower()


@dataclass(kw_only=True, eq=False)
class Customer(Aggregate):
    """Customer aggregate; a blocked customer cannot reserve."""
    first_name: str
    last_name: str
    email: str
    created_at: datetime
    blocked_at: datetime | None = None

    @classmethod
    def create(cls, first_name, last_name, email, created_at: datetime, id=None) -> 'Customer':
        first_name, last_name, email = validate_person_data(first_name, last_name, email)
        customer = cls(
            id=resolve_id(id),
            first_name=first_name,
            last_name=last_name,
            email=email,
            created_at=created_at,
        )
        customer.add_event(CustomerRegistered(
            aggregate_id=customer.id,
            customer_id=customer.id,
            email=customer.email,
        ))
        return customer

    @property
    def is_blocked(self) -> bool:
        return self.blocked_at is not None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def block(self, blocked_at: datetime):
        if self.is_blocked:
            raise CustomerAlreadyBlockedError(f"Customer {self.id} is already blocked")

        self.blocked_at = blocked_at
        self.add_event(CustomerBlocked(aggregate_id=self.id, customer_id=self.id))


class AdminRights(Flag):
    NONE = 0
    VIEW_REPORTS = 1
    MANAGE_FLEET = 2
    MANAGE_RESERVATIONS = 4
    MANAGE_RENTALS = 8
    MANAGE_USERS = 16


ALL_ADMIN_RIGHTS = (
    AdminRights.VIEW_REPORTS
    | AdminRights.MANAGE_FLEET
    | AdminRights.MANAGE_RESERVATIONS
    | AdminRights.MANAGE_RENTALS
    | AdminRights.MANAGE_USERS
)


def _parse_admin_rights(value) -> AdminRights:
    if isinstance(value, AdminRights):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0 or value & ~ALL_ADMIN_RIGHTS.value:
            raise InvalidAdminRightsError(f"Unsupported admin rights bitmask: {value}")
        return AdminRights(value)
    raise InvalidAdminRightsError(f"Unsupported admin rights value: {value!r}")


@dataclass(kw_only=True, eq=False)
class Employee(Aggregate):
    """
    Employee record

    Rights are always replaced as a whole set. Deactivation happens once
    and is not reversible.
    """
    first_name: str
    last_name: str
    email: str
    personnel_number: str
    created_at: datetime
    phone: str = ''
    admin_rights: AdminRights = AdminRights.NONE
    is_active: bool = True
    deactivated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        first_name,
        last_name,
        email,
        personnel_number,
        created_at: datetime,
        phone: str = '',
        admin_rights=AdminRights.NONE,
        id=None,
    ) -> 'Employee':
        first_name, last_name, email = validate_person_data(first_name, last_name, email)
        personnel_number = (personnel_number or '').strip()
        if not personnel_number:
            raise InvalidInputError(
                "Personnel number is required", code='personnel_number_required'
            )
        if created_at is None:
            raise InvalidInputError("Creation timestamp is required", code='created_at_required')

        return cls(
            id=resolve_id(id),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=(phone or '').strip(),
            personnel_number=personnel_number,
            admin_rights=_parse_admin_rights(admin_rights),
            created_at=created_at,
        )

    @property
    def is_admin(self) -> bool:
        return self.admin_rights != AdminRights.NONE

    def set_admin_rights(self, admin_rights):
        self.admin_rights = _parse_admin_rights(admin_rights)

    def deactivate(self, deactivated_at: datetime):
        if not self.is_active:
            raise EmployeeAlreadyDeactivatedError(f"Employee {self.personnel_number} is already deactivated")

        self.is_active = False
        self.deactivated_at = deactivated_at
