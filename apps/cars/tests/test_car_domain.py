from datetime import datetime, timezone
from uuid import UUID

import pytest

from apps.cars.domain.entities import Car, CarCategory, CarStatus
from apps.cars.domain.errors import (
    CarNotAvailableError,
    CarRetiredError,
    InvalidCategoryError,
    InvalidLicensePlateError,
)
from apps.cars.domain.events import CarRegistered, CarStatusChanged
from shared.domain.errors import ErrorKind, InvalidIdError, InvalidInputError, InvalidStatusTransitionError

CREATED_AT = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_car(**overrides) -> Car:
    params = dict(
        manufacturer="Skoda",
        model="Octavia",
        license_plate="B-AB-1234",
        category=CarCategory.COMPACT,
        created_at=CREATED_AT,
    )
    params.update(overrides)
    return Car.create(**params)


def test_create_trims_and_normalizes_fields():
    car = make_car(manufacturer="  VW ", model=" Golf ", license_plate=" B-XY-99 ", category="Compact")

    assert car.manufacturer == "VW"
    assert car.model == "Golf"
    assert car.license_plate == "B-XY-99"
    assert car.category == CarCategory.COMPACT
    assert car.status == CarStatus.AVAILABLE
    assert car.created_at == CREATED_AT
    assert isinstance(car.events[0], CarRegistered)


@pytest.mark.parametrize("field", ["manufacturer", "model", "license_plate"])
def test_create_requires_text_fields(field):
    with pytest.raises(InvalidInputError) as excinfo:
        make_car(**{field: "   "})

    assert excinfo.value.code == f"{field}_required"


@pytest.mark.parametrize("plate", ["B AB 12", "b-xy-99", "B_XY"])
def test_create_rejects_malformed_license_plate(plate):
    with pytest.raises(InvalidLicensePlateError):
        make_car(license_plate=plate)


def test_create_rejects_unknown_category():
    with pytest.raises(InvalidCategoryError):
        make_car(category="limousine")


def test_create_uses_supplied_id_and_rejects_malformed_one():
    car = make_car(id="00000000-0000-0006-0000-000000000000")
    assert car.id == UUID("00000000-0000-0006-0000-000000000000")

    with pytest.raises(InvalidIdError):
        make_car(id="not-a-uuid")


def test_rent_and_return_cycle():
    car = make_car()
    car.clear_events()

    car.mark_as_rented()
    assert car.status == CarStatus.RENTED
    car.mark_as_available()
    assert car.status == CarStatus.AVAILABLE

    changes = [(e.old_status, e.new_status) for e in car.events]
    assert changes == [("available", "rented"), ("rented", "available")]
    assert all(isinstance(e, CarStatusChanged) for e in car.events)


def test_mark_as_rented_requires_available_car():
    car = make_car()
    car.send_to_maintenance()

    with pytest.raises(CarNotAvailableError) as excinfo:
        car.mark_as_rented()

    assert excinfo.value.kind == ErrorKind.INVALID_STATUS_TRANSITION
    assert car.status == CarStatus.MAINTENANCE


def test_maintenance_cycle_and_guards():
    car = make_car()

    with pytest.raises(InvalidStatusTransitionError):
        car.return_from_maintenance()

    car.send_to_maintenance()
    with pytest.raises(InvalidStatusTransitionError):
        car.send_to_maintenance()
    with pytest.raises(InvalidStatusTransitionError):
        car.mark_as_available()

    car.return_from_maintenance()
    assert car.status == CarStatus.AVAILABLE


@pytest.mark.parametrize("setup", [[], ["mark_as_rented"], ["send_to_maintenance"]])
def test_retire_from_any_state(setup):
    car = make_car()
    for step in setup:
        getattr(car, step)()

    car.retire()

    assert car.status == CarStatus.RETIRED
    assert car.is_retired


@pytest.mark.parametrize(
    "transition",
    ["mark_as_rented", "mark_as_available", "send_to_maintenance", "return_from_maintenance"],
)
def test_every_transition_from_retired_fails(transition):
    car = make_car()
    car.retire()

    with pytest.raises(CarRetiredError):
        getattr(car, transition)()

    assert car.status == CarStatus.RETIRED


@pytest.mark.parametrize(
    "setup, operational",
    [([], True), (["mark_as_rented"], True), (["send_to_maintenance"], False), (["retire"], False)],
)
def test_operational_cars_count_toward_capacity(setup, operational):
    car = make_car()
    for step in setup:
        getattr(car, step)()

    assert car.is_operational is operational


def test_retire_is_idempotent():
    car = make_car()
    car.retire()
    car.clear_events()

    car.retire()

    assert car.status == CarStatus.RETIRED
    assert car.events == []


def test_cars_compare_by_id():
    car = make_car()
    same = Car(
        id=car.id,
        manufacturer="Other",
        model="Other",
        license_plate="X-1",
        category=CarCategory.SUV,
        created_at=CREATED_AT,
    )

    assert car == same
    assert len({car, same}) == 1
    assert car != make_car()
