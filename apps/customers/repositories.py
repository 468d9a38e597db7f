"""ORM-backed repository for the Customer aggregate."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import structlog

from apps.customers.domain.entities import Customer
from apps.customers.models import Customer as CustomerModel
from shared.infrastructure.querysets import lock_queryset_if_possible

logger = structlog.get_logger(__name__)


class CustomerRepository:

    def get_by_id(self, customer_id: UUID, lock: bool = False) -> Optional[Customer]:
        queryset = CustomerModel.objects.filter(pk=customer_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        row = queryset.first()
        if row is None:
            logger.debug("customer.not_found", customer_id=str(customer_id))
            return None
        return Customer(
            id=row.id,
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
            created_at=row.created_at,
            blocked_at=row.blocked_at,
        )

    def exists(self, customer_id: UUID) -> bool:
        return CustomerModel.objects.filter(pk=customer_id).exists()

    def exists_email(self, email: str) -> bool:
        return CustomerModel.objects.filter(email=email).exists()

    def save(self, customer: Customer) -> int:
        fields = {
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "created_at": customer.created_at,
            "blocked_at": customer.blocked_at,
        }
        updated = CustomerModel.objects.filter(pk=customer.id).update(**fields)
        if updated:
            return updated
        CustomerModel.objects.create(id=customer.id, **fields)
        return 1
