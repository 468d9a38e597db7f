from datetime import datetime, timedelta, timezone

import pytest

from apps.customers.domain.entities import AdminRights, Customer, Employee, validate_person_data
from apps.customers.domain.errors import (
    CustomerAlreadyBlockedError,
    EmployeeAlreadyDeactivatedError,
    InvalidAdminRightsError,
    InvalidEmailError,
)
from shared.domain.errors import InvalidInputError

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_validate_person_data_normalizes():
    assert validate_person_data(" Ada ", " Lovelace ", " Ada@Example.COM ") == (
        "Ada",
        "Lovelace",
        "ada@example.com",
    )


@pytest.mark.parametrize(
    "first, last, email, code",
    [
        ("", "Lovelace", "ada@example.com", "first_name_required"),
        ("Ada", " ", "ada@example.com", "last_name_required"),
        ("Ada", "Lovelace", None, "email_required"),
        ("Ada", "Lovelace", "ada@example", "invalid_email"),
    ],
)
def test_validate_person_data_rejects(first, last, email, code):
    with pytest.raises(InvalidInputError) as excinfo:
        validate_person_data(first, last, email)

    assert excinfo.value.code == code


def test_customer_block_once():
    customer = Customer.create("Ada", "Lovelace", "ada@example.com", created_at=NOW)
    assert not customer.is_blocked

    customer.block(NOW + timedelta(days=1))
    assert customer.is_blocked
    assert customer.blocked_at == NOW + timedelta(days=1)

    with pytest.raises(CustomerAlreadyBlockedError):
        customer.block(NOW + timedelta(days=2))
    assert customer.blocked_at == NOW + timedelta(days=1)


def test_employee_requires_personnel_number():
    with pytest.raises(InvalidInputError) as excinfo:
        Employee.create("Grace", "Hopper", "grace@example.com", personnel_number=" ", created_at=NOW)

    assert excinfo.value.code == "personnel_number_required"


def test_employee_shares_person_validation():
    with pytest.raises(InvalidEmailError):
        Employee.create("Grace", "Hopper", "grace", personnel_number="E-1", created_at=NOW)


def test_employee_admin_rights_replace_whole_set():
    employee = Employee.create(
        "Grace",
        "Hopper",
        "grace@example.com",
        personnel_number="E-1",
        created_at=NOW,
        admin_rights=AdminRights.VIEW_REPORTS,
    )
    assert employee.is_admin

    employee.set_admin_rights(AdminRights.MANAGE_FLEET | AdminRights.MANAGE_RENTALS)
    assert employee.admin_rights == AdminRights.MANAGE_FLEET | AdminRights.MANAGE_RENTALS
    assert AdminRights.VIEW_REPORTS not in employee.admin_rights

    employee.set_admin_rights(0)
    assert not employee.is_admin

    with pytest.raises(InvalidAdminRightsError):
        employee.set_admin_rights(64)


def test_employee_deactivates_once():
    employee = Employee.create("Grace", "Hopper", "grace@example.com", personnel_number="E-1", created_at=NOW)
    assert employee.is_active

    employee.deactivate(NOW)
    assert not employee.is_active
    assert employee.deactivated_at == NOW

    with pytest.raises(EmployeeAlreadyDeactivatedError):
        employee.deactivate(NOW)
