"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions: load the
aggregates, run the state transition and any conflict check, then
stage the changes and commit exactly once.

Commands:
- CreateReservationCommand: Create a draft reservation
- ChangeReservationPeriodCommand: Move a draft to another period
- ConfirmReservationCommand: Confirm a draft if the category has capacity
- CancelReservationCommand: Cancel a draft or confirmed reservation
- ExpireReservationsCommand: Expire stale drafts in one batch
- PickupCommand: Hand over a car for a confirmed reservation
- ReturnRentalCommand: Close an active rental
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from django.conf import settings

from shared.application.clock import Clock, SystemClock
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import DomainError, InvalidStatusTransitionError, StartInPastError
from shared.domain.identifiers import require_id, resolve_id
from shared.domain.value_objects import Period
from apps.bookings.application.availability import CarAvailabilityService
from apps.bookings.domain.entities import Rental, Reservation
from apps.bookings.domain.errors import (
    NoCarAvailableError,
    RentalAlreadyExistsError,
    RentalNotFoundError,
    ReservationAlreadyExistsError,
    ReservationNotFoundError,
)
from apps.bookings.domain.policies import ReservationConflict, ReservationConflictPolicy
from apps.bookings.repositories import RentalRepository, ReservationRepository
from apps.cars.domain.entities import CarStatus
from apps.cars.domain.errors import CarNotAvailableError, CarNotFoundError
from apps.cars.repositories import CarRepository
from apps.customers.domain.errors import CustomerBlockedError, CustomerNotFoundError
from apps.customers.repositories import CustomerRepository

logger = structlog.get_logger(__name__)


def _sync_car_status() -> bool:
    return getattr(settings, 'CAR_RENTAL_SYNC_CAR_STATUS', True)


def _draft_ttl() -> timedelta:
    return timedelta(minutes=getattr(settings, 'CAR_RENTAL_DRAFT_TTL_MINUTES', 0))


def _require_future_start(start: datetime, now: datetime):
    if start is not None and start <= now:
        raise StartInPastError(
            f"Period start {start.isoformat()} must be after {now.isoformat()}"
        )


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    customer_id: object
    car_category: str
    start: datetime
    end: datetime
    id: object = None


@dataclass
class ChangeReservationPeriodCommand:
    reservation_id: object
    start: datetime
    end: datetime


@dataclass
class ConfirmReservationCommand:
    reservation_id: object


@dataclass
class CancelReservationCommand:
    reservation_id: object


@dataclass
class ExpireReservationsCommand:
    """Expire every draft created at or before now minus the draft TTL"""
    pass


@dataclass
class PickupCommand:
    """
    Command to hand over a car

    Without `car_id` the first free car of the reserved category is used.
    """
    reservation_id: object
    fuel_out: int
    km_out: int
    car_id: object = None
    rental_id: object = None


@dataclass
class ReturnRentalCommand:
    rental_id: object
    fuel_in: int
    km_in: int


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Bookings are future-only: a start at or before now is rejected before
    the aggregate is built. The customer must exist and not be blocked.
    """

    def __init__(self, reservation_repo: ReservationRepository, customer_repo: CustomerRepository, clock: Clock):
        self.reservation_repo = reservation_repo
        self.customer_repo = customer_repo
        self.clock = clock

    def handle(self, command: CreateReservationCommand) -> Reservation:
        now = self.clock.now()

        try:
            _require_future_start(command.start, now)
            reservation = Reservation.create(
                customer_id=command.customer_id,
                car_category=command.car_category,
                start=command.start,
                end=command.end,
                created_at=now,
                id=resolve_id(command.id),
            )

            with DjangoUnitOfWork() as uow:
                customer = self.customer_repo.get_by_id(reservation.customer_id)
                if not customer:
                    raise CustomerNotFoundError(f"Customer {reservation.customer_id} not found")
                if customer.is_blocked:
                    raise CustomerBlockedError(f"Customer {customer.id} is blocked")
                if self.reservation_repo.exists(reservation.id):
                    raise ReservationAlreadyExistsError(f"Reservation {reservation.id} already exists")

                uow.register(self.reservation_repo, reservation)
                rows = uow.commit("Reservation created")
        except DomainError as exc:
            logger.warning("reservation.create.rejected", customer_id=str(command.customer_id), code=exc.code)
            raise

        logger.info(
            "reservation.created",
            reservation_id=str(reservation.id),
            category=reservation.car_category.value,
            period=str(reservation.period),
            rows=rows,
        )
        return reservation


class ChangeReservationPeriodHandler:

    def __init__(self, reservation_repo: ReservationRepository, clock: Clock):
        self.reservation_repo = reservation_repo
        self.clock = clock

    def handle(self, command: ChangeReservationPeriodCommand) -> Reservation:
        try:
            reservation_id = require_id(command.reservation_id)

            with DjangoUnitOfWork() as uow:
                reservation = self.reservation_repo.get_by_id(reservation_id, lock=True)
                if not reservation:
                    raise ReservationNotFoundError(f"Reservation {reservation_id} not found")

                _require_future_start(command.start, self.clock.now())
                reservation.change_period(Period(command.start, command.end))

                uow.register(self.reservation_repo, reservation)
                rows = uow.commit("Reservation period changed")
        except DomainError as exc:
            logger.warning("reservation.change_period.rejected", reservation_id=str(command.reservation_id), code=exc.code)
            raise

        logger.info("reservation.period_changed", reservation_id=str(reservation.id), period=str(reservation.period), rows=rows)
        return reservation


class ConfirmReservationHandler:
    """
    Handler for ConfirmReservation command

    Strategy:
    1. Load the reservation with SELECT FOR UPDATE
    2. Lock the car rows of its category so competing confirmations queue up
    3. Run the capacity policy; a conflict aborts with its mapped error
    4. Confirm and commit once
    """

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        car_repo: CarRepository,
        policy: ReservationConflictPolicy,
        clock: Clock,
    ):
        self.reservation_repo = reservation_repo
        self.car_repo = car_repo
        self.policy = policy
        self.clock = clock

    def handle(self, command: ConfirmReservationCommand) -> Reservation:
        try:
            reservation_id = require_id(command.reservation_id)

            with DjangoUnitOfWork() as uow:
                reservation = self.reservation_repo.get_by_id(reservation_id, lock=True)
                if not reservation:
                    raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
                if not reservation.is_draft:
                    raise InvalidStatusTransitionError(
                        f"Cannot confirm reservation {reservation.id} from status {reservation.status.value}"
                    )

                self.car_repo.lock_category(reservation.car_category)
                conflict = self.policy.check(
                    reservation.car_category,
                    reservation.period,
                    ignore_reservation_id=reservation.id,
                )
                if conflict != ReservationConflict.NONE:
                    raise Reservation.map_conflict(conflict)

                reservation.confirm(self.clock.now())

                uow.register(self.reservation_repo, reservation)
                rows = uow.commit("Reservation confirmed")
        except DomainError as exc:
            logger.warning("reservation.confirm.rejected", reservation_id=str(command.reservation_id), code=exc.code)
            raise

        logger.info("reservation.confirmed", reservation_id=str(reservation.id), rows=rows)
        return reservation


class CancelReservationHandler:

    def __init__(self, reservation_repo: ReservationRepository, clock: Clock):
        self.reservation_repo = reservation_repo
        self.clock = clock

    def handle(self, command: CancelReservationCommand) -> Reservation:
        try:
            reservation_id = require_id(command.reservation_id)

            with DjangoUnitOfWork() as uow:
                reservation = self.reservation_repo.get_by_id(reservation_id, lock=True)
                if not reservation:
                    raise ReservationNotFoundError(f"Reservation {reservation_id} not found")

                reservation.cancel(self.clock.now())

                uow.register(self.reservation_repo, reservation)
                rows = uow.commit("Reservation cancelled")
        except DomainError as exc:
            logger.warning("reservation.cancel.rejected", reservation_id=str(command.reservation_id), code=exc.code)
            raise

        logger.info("reservation.cancelled", reservation_id=str(reservation.id), rows=rows)
        return reservation


class ExpireReservationsHandler:
    """
    Handler for the periodic expiry batch

    A draft that fails to expire is logged and skipped; the batch still
    commits once. Returns the number of expired reservations.
    """

    def __init__(self, reservation_repo: ReservationRepository, clock: Clock, ttl: timedelta | None = None):
        self.reservation_repo = reservation_repo
        self.clock = clock
        self.ttl = ttl

    def handle(self, command: ExpireReservationsCommand) -> int:
        now = self.clock.now()
        ttl = self.ttl if self.ttl is not None else _draft_ttl()
        cutoff = now - ttl
        expired = 0

        with DjangoUnitOfWork() as uow:
            drafts = self.reservation_repo.select_drafts_to_expire(cutoff)

            for reservation in drafts:
                try:
                    reservation.expire(now)
                except DomainError as exc:
                    logger.warning(
                        "reservation.expire.skipped",
                        reservation_id=str(reservation.id),
                        code=exc.code,
                        error=exc.message,
                    )
                    continue

                uow.register(self.reservation_repo, reservation)
                expired += 1

            rows = uow.commit("Draft reservations expired")

        logger.info("reservation.expire.batch", candidates=len(drafts), expired=expired, rows=rows)
        return expired


class PickupHandler:
    """
    Handler for Pickup command

    Binds a concrete car to a confirmed reservation:
    1. Load the reservation (must be CONFIRMED, not yet picked up)
    2. Lock the category's car rows
    3. Validate the requested car or select the first free one
    4. Create the rental, link it to the reservation, mark the car rented
    5. Commit once; the unique reservation_id on rentals rejects a
       concurrent second pick-up at commit time
    """

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        rental_repo: RentalRepository,
        car_repo: CarRepository,
        availability: CarAvailabilityService,
        clock: Clock,
        sync_car_status: bool | None = None,
    ):
        self.reservation_repo = reservation_repo
        self.rental_repo = rental_repo
        self.car_repo = car_repo
        self.availability = availability
        self.clock = clock
        self.sync_car_status = sync_car_status

    def handle(self, command: PickupCommand) -> Rental:
        sync = self.sync_car_status if self.sync_car_status is not None else _sync_car_status()

        try:
            reservation_id = require_id(command.reservation_id)

            with DjangoUnitOfWork() as uow:
                reservation = self.reservation_repo.get_by_id(reservation_id, lock=True)
                if not reservation:
                    raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
                if not reservation.is_confirmed:
                    raise InvalidStatusTransitionError(
                        f"Cannot pick up reservation {reservation.id} in status {reservation.status.value}"
                    )
                if reservation.rental_id or self.rental_repo.exists_for_reservation(reservation.id):
                    raise RentalAlreadyExistsError(f"Reservation {reservation.id} was already picked up")

                self.car_repo.lock_category(reservation.car_category)
                car = self._resolve_car(command, reservation)

                rental = Rental.create_at_pickup(
                    reservation_id=reservation.id,
                    customer_id=reservation.customer_id,
                    car_id=car.id,
                    pickup_at=self.clock.now(),
                    fuel_out=command.fuel_out,
                    km_out=command.km_out,
                    id=resolve_id(command.rental_id),
                )
                reservation.assign_rental(rental.id)
                if sync:
                    car.mark_as_rented()
                    uow.register(self.car_repo, car)

                uow.register(self.rental_repo, rental)
                uow.register(self.reservation_repo, reservation)
                rows = uow.commit("Rental picked up")
        except DomainError as exc:
            logger.warning("rental.pickup.rejected", reservation_id=str(command.reservation_id), code=exc.code)
            raise

        logger.info(
            "rental.picked_up",
            rental_id=str(rental.id),
            reservation_id=str(reservation.id),
            car_id=str(car.id),
            rows=rows,
        )
        return rental

    def _resolve_car(self, command: PickupCommand, reservation: Reservation):
        if command.car_id is None or (isinstance(command.car_id, str) and not command.car_id.strip()):
            car = self.availability.first_free_car(reservation.car_category, reservation.period)
            if car is None:
                raise NoCarAvailableError(
                    f"No {reservation.car_category.value} car is free for {reservation.period}"
                )
            return car

        car_id = require_id(command.car_id)
        car = self.car_repo.get_by_id(car_id, lock=True)
        if not car:
            raise CarNotFoundError(f"Car {car_id} not found")
        if not self.availability.is_car_free(car, reservation.car_category, reservation.period):
            raise CarNotAvailableError(
                f"Car {car.license_plate} cannot be handed over for reservation {reservation.id}"
            )
        return car


class ReturnRentalHandler:

    def __init__(
        self,
        rental_repo: RentalRepository,
        car_repo: CarRepository,
        clock: Clock,
        sync_car_status: bool | None = None,
    ):
        self.rental_repo = rental_repo
        self.car_repo = car_repo
        self.clock = clock
        self.sync_car_status = sync_car_status

    def handle(self, command: ReturnRentalCommand) -> Rental:
        sync = self.sync_car_status if self.sync_car_status is not None else _sync_car_status()

        try:
            rental_id = require_id(command.rental_id)

            with DjangoUnitOfWork() as uow:
                rental = self.rental_repo.get_by_id(rental_id, lock=True)
                if not rental:
                    raise RentalNotFoundError(f"Rental {rental_id} not found")

                rental.return_car(self.clock.now(), command.fuel_in, command.km_in)
                uow.register(self.rental_repo, rental)

                if sync:
                    car = self.car_repo.get_by_id(rental.car_id, lock=True)
                    if not car:
                        raise CarNotFoundError(f"Car {rental.car_id} not found")
                    if car.status == CarStatus.RENTED:
                        car.mark_as_available()
                        uow.register(self.car_repo, car)

                rows = uow.commit("Rental returned")
        except DomainError as exc:
            logger.warning("rental.return.rejected", rental_id=str(command.rental_id), code=exc.code)
            raise

        logger.info(
            "rental.returned",
            rental_id=str(rental.id),
            refuel_fee=rental.needs_refuel_fee(),
            rows=rows,
        )
        return rental


def register_handlers(bus, clock: Clock | None = None):
    """Wire the booking commands into a message bus."""
    clock = clock or SystemClock()
    reservation_repo = ReservationRepository()
    rental_repo = RentalRepository()
    car_repo = CarRepository()
    customer_repo = CustomerRepository()
    policy = ReservationConflictPolicy(car_repo, reservation_repo)
    availability = CarAvailabilityService(car_repo, rental_repo, clock)

    handlers = {
        CreateReservationCommand: CreateReservationHandler(reservation_repo, customer_repo, clock),
        ChangeReservationPeriodCommand: ChangeReservationPeriodHandler(reservation_repo, clock),
        ConfirmReservationCommand: ConfirmReservationHandler(reservation_repo, car_repo, policy, clock),
        CancelReservationCommand: CancelReservationHandler(reservation_repo, clock),
        ExpireReservationsCommand: ExpireReservationsHandler(reservation_repo, clock),
        PickupCommand: PickupHandler(reservation_repo, rental_repo, car_repo, availability, clock),
        ReturnRentalCommand: ReturnRentalHandler(rental_repo, car_repo, clock),
    }
    for command_type, handler in handlers.items():
        bus.register_command_handler(command_type, handler.handle)
