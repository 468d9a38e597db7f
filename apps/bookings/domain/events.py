"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Period


# ===== Reservation Events =====

@dataclass(kw_only=True)
class ReservationCreated(DomainEvent):
    """Event: A draft reservation was created"""
    reservation_id: UUID
    customer_id: UUID
    car_category: str
    period: Period


@dataclass(kw_only=True)
class ReservationPeriodChanged(DomainEvent):
    reservation_id: UUID
    old_period: Period
    new_period: Period


@dataclass(kw_only=True)
class ReservationConfirmed(DomainEvent):
    """
    Event: Reservation confirmed (DRAFT -> CONFIRMED)

    The category had capacity for the period when this was raised.
    """
    reservation_id: UUID
    car_category: str
    period: Period
    confirmed_at: datetime


@dataclass(kw_only=True)
class ReservationCancelled(DomainEvent):
    reservation_id: UUID
    old_status: str
    cancelled_at: datetime


@dataclass(kw_only=True)
class ReservationExpired(DomainEvent):
    """Event: Draft reservation expired by the periodic batch"""
    reservation_id: UUID
    expired_at: datetime


# ===== Rental Events =====

@dataclass(kw_only=True)
class RentalPickedUp(DomainEvent):
    """
    Event: A car was handed over (rental created)

    Triggers:
    - Audit log entry
    """
    rental_id: UUID
    reservation_id: UUID
    car_id: UUID
    pickup_at: datetime


@dataclass(kw_only=True)
class RentalReturned(DomainEvent):
    rental_id: UUID
    car_id: UUID
    return_at: datetime
    needs_refuel_fee: bool
