"""
Booking Domain Entities

Core business entities for the booking domain:
- Reservation: intent to rent a car category for a period
- Rental: a concrete car handed over for a confirmed reservation
- ReservationStatus / RentalStatus: FSM states for both lifecycles
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from shared.domain.base import Aggregate
from shared.domain.errors import (
    InvalidIdError,
    InvalidStatusTransitionError,
    InvalidTimestampError,
)
from shared.domain.identifiers import is_blank_id, require_id, resolve_id
from shared.domain.value_objects import Period
from apps.cars.domain.entities import CarCategory
from apps.bookings.domain.errors import (
    InvalidFuelLevelError,
    InvalidKmError,
    NoCategoryCapacityError,
    OverCapacityError,
    RentalAlreadyAssignedError,
)
from apps.bookings.domain.events import (
    RentalPickedUp,
    RentalReturned,
    ReservationCancelled,
    ReservationConfirmed,
    ReservationCreated,
    ReservationExpired,
    ReservationPeriodChanged,
)
from apps.bookings.domain.policies import ReservationConflict

FUEL_MIN = 0
FUEL_MAX = 100


class ReservationStatus(Enum):
    """
    Reservation Status Finite State Machine

    State transitions:
    - DRAFT -> CONFIRMED (category has capacity)
    - DRAFT -> EXPIRED (periodic batch)
    - DRAFT -> CANCELLED
    - CONFIRMED -> CANCELLED
    """
    DRAFT = 'draft'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'


class RentalStatus(Enum):
    ACTIVE = 'active'
    RETURNED = 'returned'


@dataclass(kw_only=True, eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    Key invariants:
    - Period start is before its end
    - Every transition timestamp is >= created_at
    - rental_id is set at most once

    The aggregate performs no capacity check; callers run the
    ReservationConflictPolicy before confirm().
    """
    customer_id: UUID
    car_category: CarCategory
    period: Period
    created_at: datetime
    status: ReservationStatus = ReservationStatus.DRAFT
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    expired_at: datetime | None = None
    rental_id: UUID | None = None

    @classmethod
    def create(
        cls,
        customer_id,
        car_category,
        start: datetime,
        end: datetime,
        created_at: datetime,
        id=None,
    ) -> 'Reservation':
        """Create a DRAFT reservation. Events: ReservationCreated"""
        reservation_id = resolve_id(id)
        period = Period(start, end)

        reservation = cls(
            id=reservation_id,
            customer_id=require_id(customer_id),
            car_category=CarCategory.parse(car_category),
            period=period,
            created_at=created_at,
        )
        reservation.add_event(ReservationCreated(
            aggregate_id=reservation.id,
            reservation_id=reservation.id,
            customer_id=reservation.customer_id,
            car_category=reservation.car_category.value,
            period=period,
        ))
        return reservation

    def _require_status(self, *allowed: ReservationStatus, action: str):
        if self.status not in allowed:
            raise InvalidStatusTransitionError(
                f"Cannot {action} reservation {self.id} from status {self.status.value}"
            )

    def _require_not_before_created(self, moment: datetime, action: str):
        if moment < self.created_at:
            raise InvalidTimestampError(
                f"Cannot {action} reservation at {moment.isoformat()}: "
                f"before its creation at {self.created_at.isoformat()}"
            )

    def change_period(self, period: Period):
        """
        Replace the period (DRAFT only)

        Events: ReservationPeriodChanged
        """
        self._require_status(ReservationStatus.DRAFT, action='change period of')
        if not isinstance(period, Period):
            raise TypeError("change_period expects a Period")

        old_period = self.period
        self.period = period
        self.add_event(ReservationPeriodChanged(
            aggregate_id=self.id,
            reservation_id=self.id,
            old_period=old_period,
            new_period=period,
        ))

    def confirm(self, confirmed_at: datetime):
        """
        Confirm reservation (DRAFT -> CONFIRMED)

        Events: ReservationConfirmed
        """
        self._require_status(ReservationStatus.DRAFT, action='confirm')
        self._require_not_before_created(confirmed_at, action='confirm')

        self.status = ReservationStatus.CONFIRMED
        self.confirmed_at = confirmed_at
        self.add_event(ReservationConfirmed(
            aggregate_id=self.id,
            reservation_id=self.id,
            car_category=self.car_category.value,
            period=self.period,
            confirmed_at=confirmed_at,
        ))

    def cancel(self, cancelled_at: datetime):
        """
        Cancel reservation (DRAFT or CONFIRMED -> CANCELLED)

        Events: ReservationCancelled
        """
        self._require_status(ReservationStatus.DRAFT, ReservationStatus.CONFIRMED, action='cancel')
        self._require_not_before_created(cancelled_at, action='cancel')

        old_status = self.status
        self.status = ReservationStatus.CANCELLED
        self.cancelled_at = cancelled_at
        self.add_event(ReservationCancelled(
            aggregate_id=self.id,
            reservation_id=self.id,
            old_status=old_status.value,
            cancelled_at=cancelled_at,
        ))

    def expire(self, expired_at: datetime):
        """
        Expire reservation (DRAFT -> EXPIRED)

        Events: ReservationExpired
        """
        self._require_status(ReservationStatus.DRAFT, action='expire')
        self._require_not_before_created(expired_at, action='expire')

        self.status = ReservationStatus.EXPIRED
        self.expired_at = expired_at
        self.add_event(ReservationExpired(
            aggregate_id=self.id,
            reservation_id=self.id,
            expired_at=expired_at,
        ))

    def assign_rental(self, rental_id: UUID):
        """
        Link the rental created at pick-up

        Assigning the same id again is a no-op; a different id is rejected.
        """
        if is_blank_id(rental_id):
            raise InvalidIdError("Rental id is required")
        if self.rental_id == rental_id:
            return
        if self.rental_id is not None:
            raise RentalAlreadyAssignedError(
                f"Reservation {self.id} is already linked to rental {self.rental_id}"
            )
        self._require_status(ReservationStatus.CONFIRMED, action='assign a rental to')

        self.rental_id = rental_id

    @staticmethod
    def map_conflict(conflict: ReservationConflict):
        """Translate a capacity conflict into the error to raise"""
        if conflict == ReservationConflict.NO_CATEGORY_CAPACITY:
            return NoCategoryCapacityError()
        if conflict == ReservationConflict.OVER_CAPACITY:
            return OverCapacityError()
        raise ValueError("map_conflict called without a conflict")

    @property
    def is_draft(self) -> bool:
        return self.status == ReservationStatus.DRAFT

    @property
    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED

    def __str__(self):
        return f"Reservation {self.id} {self.car_category.value} {self.period} ({self.status.value})"


def _validate_fuel(level: int):
    if not isinstance(level, int) or isinstance(level, bool) or not FUEL_MIN <= level <= FUEL_MAX:
        raise InvalidFuelLevelError(f"Fuel level must be between {FUEL_MIN} and {FUEL_MAX}, got {level!r}")


@dataclass(kw_only=True, eq=False)
class Rental(Aggregate):
    """
    Rental Aggregate Root

    Created once per reservation at pick-up and closed once at return.
    """
    reservation_id: UUID
    customer_id: UUID
    car_id: UUID
    pickup_at: datetime
    fuel_level_out: int
    km_out: int
    status: RentalStatus = RentalStatus.ACTIVE
    return_at: datetime | None = None
    fuel_level_in: int | None = None
    km_in: int | None = None

    @classmethod
    def create_at_pickup(
        cls,
        reservation_id,
        customer_id,
        car_id,
        pickup_at: datetime,
        fuel_out: int,
        km_out: int,
        id=None,
    ) -> 'Rental':
        """
        Create an ACTIVE rental

        Events: RentalPickedUp
        """
        rental_id = resolve_id(id)
        reservation_id = require_id(reservation_id)
        customer_id = require_id(customer_id)
        car_id = require_id(car_id)
        _validate_fuel(fuel_out)
        if not isinstance(km_out, int) or isinstance(km_out, bool) or km_out < 0:
            raise InvalidKmError(f"Odometer reading must be non-negative, got {km_out!r}")

        rental = cls(
            id=rental_id,
            reservation_id=reservation_id,
            customer_id=customer_id,
            car_id=car_id,
            pickup_at=pickup_at,
            fuel_level_out=fuel_out,
            km_out=km_out,
        )
        rental.add_event(RentalPickedUp(
            aggregate_id=rental.id,
            rental_id=rental.id,
            reservation_id=reservation_id,
            car_id=car_id,
            pickup_at=pickup_at,
        ))
        return rental

    def return_car(self, return_at: datetime, fuel_in: int, km_in: int):
        """
        Close the rental (ACTIVE -> RETURNED)

        Events: RentalReturned
        """
        if self.status != RentalStatus.ACTIVE:
            raise InvalidStatusTransitionError(
                f"Cannot return rental {self.id} from status {self.status.value}"
            )
        if return_at < self.pickup_at:
            raise InvalidTimestampError(
                f"Return at {return_at.isoformat()} is before pick-up at {self.pickup_at.isoformat()}"
            )
        if not isinstance(km_in, int) or isinstance(km_in, bool) or km_in < self.km_out:
            raise InvalidKmError(f"Odometer at return ({km_in!r}) is below pick-up reading ({self.km_out})")
        _validate_fuel(fuel_in)

        self.status = RentalStatus.RETURNED
        self.return_at = return_at
        self.fuel_level_in = fuel_in
        self.km_in = km_in
        self.add_event(RentalReturned(
            aggregate_id=self.id,
            rental_id=self.id,
            car_id=self.car_id,
            return_at=return_at,
            needs_refuel_fee=self.needs_refuel_fee(),
        ))

    def needs_refuel_fee(self) -> bool:
        return (
            self.status == RentalStatus.RETURNED
            and self.fuel_level_in is not None
            and self.fuel_level_in < self.fuel_level_out
        )

    @property
    def is_active(self) -> bool:
        return self.status == RentalStatus.ACTIVE

    @property
    def driven_km(self) -> int | None:
        if self.km_in is None:
            return None
        return self.km_in - self.km_out
