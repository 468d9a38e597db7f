"""Customer Domain Events"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class CustomerRegistered(DomainEvent):
    customer_id: UUID
    email: str


@dataclass(kw_only=True)
class CustomerBlocked(DomainEvent):
    """
    Event: Customer was blocked

    Triggers:
    - Audit log entry
    """
    customer_id: UUID
