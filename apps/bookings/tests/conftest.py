from uuid import uuid4

import pytest

from apps.bookings.application.availability import CarAvailabilityService
from apps.bookings.domain.entities import Rental, Reservation
from apps.bookings.domain.policies import ReservationConflictPolicy
from apps.bookings.repositories import RentalRepository, ReservationRepository
from apps.cars.domain.entities import Car, CarCategory, CarStatus
from apps.cars.repositories import CarRepository
from apps.bookings.tests.factories import END, START


@pytest.fixture
def car_repo():
    return CarRepository()

@pytest.fixture
def reservation_repo():
    return ReservationRepository()

@pytest.fixture
def rental_repo():
    return RentalRepository()

@pytest.fixture
def policy(car_repo, reservation_repo):
    return ReservationConflictPolicy(car_repo, reservation_repo)

@pytest.fixture
def availability(car_repo, rental_repo, clock):
    return CarAvailabilityService(car_repo, rental_repo, clock)

@pytest.fixture
def add_car(db, car_repo, clock):
    counter = iter(range(1, 10_000))

    def _add(id=None, category=CarCategory.ECONOMY, status=CarStatus.AVAILABLE) -> Car:
        car = Car.create(
            manufacturer="Skoda",
            model="Fabia",
            license_plate=f"T-{next(counter)}",
            category=category,
            created_at=clock.now(),
            id=id,
        )
        car.status = status
        car.clear_events()
        car_repo.save(car)
        return car

    return _add

@pytest.fixture
def add_reservation(db, reservation_repo, customer, clock):
    def _add(start=START, end=END, category=CarCategory.ECONOMY, confirmed=False, created_at=None) -> Reservation:
        reservation = Reservation.create(
            customer_id=customer.id,
            car_category=category,
            start=start,
            end=end,
            created_at=created_at or clock.now(),
        )
        if confirmed:
            reservation.confirm(reservation.created_at)
        reservation.clear_events()
        reservation_repo.save(reservation)
        return reservation

    return _add

@pytest.fixture
def add_active_rental(db, rental_repo, reservation_repo, clock):
    def _add(reservation: Reservation, car: Car, km_out: int = 1000, fuel_out: int = 100) -> Rental:
        rental = Rental.create_at_pickup(
            reservation_id=reservation.id,
            customer_id=reservation.customer_id,
            car_id=car.id,
            pickup_at=clock.now(),
            fuel_out=fuel_out,
            km_out=km_out,
            id=uuid4(),
        )
        rental.clear_events()
        rental_repo.save(rental)
        reservation.assign_rental(rental.id)
        reservation_repo.save(reservation)
        return rental

    return _add
