from datetime import datetime, timezone

import pytest

from shared.application.clock import FixedClock

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def customer(db, clock):
    from apps.customers.domain.entities import Customer
    from apps.customers.repositories import CustomerRepository

    customer = Customer.create("Ada", "Lovelace", "ada@example.com", created_at=clock.now())
    CustomerRepository().save(customer)
    return customer
