"""
Car Domain Events

Published after commit whenever a car's operational status changes.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class CarRegistered(DomainEvent):
    """Event: A car joined the fleet"""
    car_id: UUID
    category: str
    license_plate: str


@dataclass(kw_only=True)
class CarStatusChanged(DomainEvent):
    """
    Event: A car moved between operational states

    Triggers:
    - Audit log entry
    """
    car_id: UUID
    old_status: str
    new_status: str
