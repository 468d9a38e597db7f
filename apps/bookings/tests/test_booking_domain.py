from datetime import datetime, timedelta, timezone
from itertools import product
from uuid import UUID, uuid4

import pytest

from apps.bookings.domain.entities import Rental, RentalStatus, Reservation, ReservationStatus
from apps.bookings.domain.errors import (
    InvalidFuelLevelError,
    InvalidKmError,
    NoCategoryCapacityError,
    OverCapacityError,
    RentalAlreadyAssignedError,
)
from apps.bookings.domain.events import ReservationConfirmed, ReservationCreated, RentalReturned
from apps.bookings.domain.policies import ReservationConflict
from apps.cars.domain.entities import CarCategory
from shared.domain.errors import (
    DomainError,
    ErrorKind,
    InvalidIdError,
    InvalidPeriodError,
    InvalidStatusTransitionError,
    InvalidTimestampError,
)
from shared.domain.value_objects import Period

CREATED = datetime(2025, 1, 1, tzinfo=timezone.utc)
START = datetime(2030, 5, 1, 10, 0, tzinfo=timezone.utc)
END = datetime(2030, 5, 5, 10, 0, tzinfo=timezone.utc)


def make_reservation(**overrides) -> Reservation:
    params = dict(
        customer_id=uuid4(),
        car_category=CarCategory.ECONOMY,
        start=START,
        end=END,
        created_at=CREATED,
    )
    params.update(overrides)
    return Reservation.create(**params)


def make_rental(**overrides) -> Rental:
    params = dict(
        reservation_id=uuid4(),
        customer_id=uuid4(),
        car_id=uuid4(),
        pickup_at=START,
        fuel_out=80,
        km_out=1000,
    )
    params.update(overrides)
    return Rental.create_at_pickup(**params)


# ===== Period =====

@pytest.mark.parametrize("offset_hours", [-5, -1, 0, 1, 5])
def test_period_valid_iff_start_before_end(offset_hours):
    end = START + timedelta(hours=offset_hours)

    if offset_hours > 0:
        assert Period.create(START, end).duration == timedelta(hours=offset_hours)
    else:
        with pytest.raises(InvalidPeriodError) as excinfo:
            Period.create(START, end)
        assert excinfo.value.kind == ErrorKind.INVALID_INPUT


def test_periods_with_equal_bounds_are_interchangeable():
    assert Period(START, END) == Period(START, END)
    assert len({Period(START, END), Period(START, END)}) == 1


def test_adjacent_periods_do_not_overlap():
    first = Period(START, END)
    second = Period(END, END + timedelta(days=1))

    assert not first.overlaps_with(second)
    assert first.overlaps_with(Period(START + timedelta(days=1), END + timedelta(days=1)))
    assert first.overlaps_with(Period(START + timedelta(hours=1), END - timedelta(hours=1)))


def test_overlap_is_symmetric():
    points = [START + timedelta(days=n) for n in range(5)]
    periods = [Period(a, b) for a, b in product(points, points) if a < b]

    for p1, p2 in product(periods, periods):
        assert p1.overlaps_with(p2) == p2.overlaps_with(p1)


# ===== Reservation =====

def test_create_reservation_starts_as_draft():
    reservation = make_reservation(car_category="suv", id="")

    assert reservation.status == ReservationStatus.DRAFT
    assert reservation.car_category == CarCategory.SUV
    assert reservation.period == Period(START, END)
    assert isinstance(reservation.id, UUID)
    assert isinstance(reservation.events[0], ReservationCreated)


def test_create_reservation_validates_period_and_ids():
    with pytest.raises(InvalidPeriodError):
        make_reservation(start=END, end=START)
    with pytest.raises(InvalidIdError):
        make_reservation(id="42")
    with pytest.raises(InvalidIdError):
        make_reservation(customer_id=UUID(int=0))


def test_change_period_only_from_draft():
    reservation = make_reservation()
    new_period = Period(START + timedelta(days=1), END + timedelta(days=1))

    reservation.change_period(new_period)
    assert reservation.period == new_period

    reservation.confirm(CREATED)
    with pytest.raises(InvalidStatusTransitionError):
        reservation.change_period(Period(START, END))
    assert reservation.period == new_period


def test_confirm_from_draft():
    reservation = make_reservation()

    reservation.confirm(CREATED + timedelta(minutes=5))

    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.confirmed_at == CREATED + timedelta(minutes=5)
    assert isinstance(reservation.events[-1], ReservationConfirmed)


def test_confirm_rejects_timestamp_before_creation():
    reservation = make_reservation()

    with pytest.raises(InvalidTimestampError):
        reservation.confirm(CREATED - timedelta(seconds=1))

    assert reservation.status == ReservationStatus.DRAFT
    assert reservation.confirmed_at is None


def test_repeated_confirm_fails():
    reservation = make_reservation()
    reservation.confirm(CREATED)

    with pytest.raises(InvalidStatusTransitionError):
        reservation.confirm(CREATED)


@pytest.mark.parametrize("confirmed", [False, True])
def test_cancel_from_draft_or_confirmed(confirmed):
    reservation = make_reservation()
    if confirmed:
        reservation.confirm(CREATED)

    reservation.cancel(CREATED + timedelta(hours=1))

    assert reservation.status == ReservationStatus.CANCELLED
    assert reservation.cancelled_at == CREATED + timedelta(hours=1)


def test_cancel_rejects_terminal_states_and_early_timestamp():
    reservation = make_reservation()
    with pytest.raises(InvalidTimestampError):
        reservation.cancel(CREATED - timedelta(days=1))

    reservation.expire(CREATED)
    with pytest.raises(InvalidStatusTransitionError):
        reservation.cancel(CREATED)

    cancelled = make_reservation()
    cancelled.cancel(CREATED)
    with pytest.raises(InvalidStatusTransitionError):
        cancelled.cancel(CREATED)


def test_expire_only_from_draft():
    reservation = make_reservation()
    reservation.expire(CREATED + timedelta(minutes=1))
    assert reservation.status == ReservationStatus.EXPIRED
    assert reservation.expired_at == CREATED + timedelta(minutes=1)

    confirmed = make_reservation()
    confirmed.confirm(CREATED)
    with pytest.raises(InvalidStatusTransitionError):
        confirmed.expire(CREATED)

    with pytest.raises(InvalidTimestampError):
        make_reservation().expire(CREATED - timedelta(minutes=1))


def test_assign_rental_is_idempotent():
    reservation = make_reservation()
    reservation.confirm(CREATED)
    rental_id = uuid4()

    reservation.assign_rental(rental_id)
    reservation.assign_rental(rental_id)

    assert reservation.rental_id == rental_id
    assert reservation.status == ReservationStatus.CONFIRMED


def test_assign_rental_rejects_a_different_rental():
    reservation = make_reservation()
    reservation.confirm(CREATED)
    first = uuid4()
    reservation.assign_rental(first)

    with pytest.raises(RentalAlreadyAssignedError) as excinfo:
        reservation.assign_rental(uuid4())

    assert excinfo.value.kind == ErrorKind.CONFLICT
    assert reservation.rental_id == first


def test_assign_rental_requires_confirmed_reservation():
    with pytest.raises(InvalidStatusTransitionError):
        make_reservation().assign_rental(uuid4())


def test_map_conflict():
    assert isinstance(Reservation.map_conflict(ReservationConflict.NO_CATEGORY_CAPACITY), NoCategoryCapacityError)
    assert isinstance(Reservation.map_conflict(ReservationConflict.OVER_CAPACITY), OverCapacityError)

    with pytest.raises(ValueError):
        Reservation.map_conflict(ReservationConflict.NONE)


# ===== Rental =====

def test_create_at_pickup_is_active():
    rental = make_rental()

    assert rental.status == RentalStatus.ACTIVE
    assert rental.is_active
    assert rental.fuel_level_out == 80
    assert rental.km_out == 1000


@pytest.mark.parametrize("field", ["reservation_id", "customer_id", "car_id"])
def test_create_at_pickup_requires_ids(field):
    with pytest.raises(InvalidIdError):
        make_rental(**{field: UUID(int=0)})


@pytest.mark.parametrize("fuel_out", [-1, 101])
def test_create_at_pickup_validates_fuel(fuel_out):
    with pytest.raises(InvalidFuelLevelError):
        make_rental(fuel_out=fuel_out)


@pytest.mark.parametrize("km_out", [-1, True, "10"])
def test_create_at_pickup_validates_km(km_out):
    with pytest.raises(InvalidKmError):
        make_rental(km_out=km_out)
    assert make_rental(km_out=0).km_out == 0


def test_return_car():
    rental = make_rental()

    rental.return_car(END, fuel_in=80, km_in=1450)

    assert rental.status == RentalStatus.RETURNED
    assert rental.return_at == END
    assert rental.km_in == 1450
    assert rental.driven_km == 450
    assert not rental.needs_refuel_fee()
    assert isinstance(rental.events[-1], RentalReturned)


def test_return_car_rejects_second_return():
    rental = make_rental()
    rental.return_car(END, fuel_in=80, km_in=1450)

    with pytest.raises(InvalidStatusTransitionError):
        rental.return_car(END, fuel_in=80, km_in=1500)


def test_return_car_rejects_return_before_pickup():
    rental = make_rental()

    with pytest.raises(InvalidTimestampError):
        rental.return_car(START - timedelta(minutes=1), fuel_in=80, km_in=1450)
    assert rental.status == RentalStatus.ACTIVE


def test_return_car_rejects_lower_km():
    rental = make_rental()

    with pytest.raises(InvalidKmError):
        rental.return_car(END, fuel_in=80, km_in=999)
    assert rental.status == RentalStatus.ACTIVE


def test_return_car_rejects_non_integer_km():
    rental = make_rental(km_out=0)

    with pytest.raises(InvalidKmError):
        rental.return_car(END, fuel_in=80, km_in=True)
    assert rental.status == RentalStatus.ACTIVE


@pytest.mark.parametrize(
    "return_at, fuel_in",
    [(END, 80), (END, 150), (START - timedelta(days=1), 80), (START - timedelta(days=1), -5)],
)
def test_return_car_with_lower_km_always_fails(return_at, fuel_in):
    rental = make_rental()

    with pytest.raises(DomainError):
        rental.return_car(return_at, fuel_in=fuel_in, km_in=10)

    assert rental.status == RentalStatus.ACTIVE
    assert rental.km_in is None


@pytest.mark.parametrize("fuel_in", [-1, 101])
def test_return_car_validates_fuel(fuel_in):
    rental = make_rental()

    with pytest.raises(InvalidFuelLevelError):
        rental.return_car(END, fuel_in=fuel_in, km_in=1200)


@pytest.mark.parametrize("fuel_in, expected", [(79, True), (80, False), (100, False), (0, True)])
def test_needs_refuel_fee(fuel_in, expected):
    rental = make_rental(fuel_out=80)
    assert not rental.needs_refuel_fee()

    rental.return_car(END, fuel_in=fuel_in, km_in=1000)

    assert rental.needs_refuel_fee() is expected
