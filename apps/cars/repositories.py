"""ORM-backed repository for the Car aggregate."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

import structlog

from apps.cars.domain.entities import OPERATIONAL_STATUSES, Car, CarCategory, CarStatus
from apps.cars.models import Car as CarModel
from shared.infrastructure.querysets import lock_queryset_if_possible

logger = structlog.get_logger(__name__)


class CarRepository:
    """Maps Car aggregates to `cars.Car` rows."""

    def get_by_id(self, car_id: UUID, lock: bool = False) -> Optional[Car]:
        queryset = CarModel.objects.filter(pk=car_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        row = queryset.first()
        return self._to_domain(row) if row else None

    def exists(self, car_id: UUID) -> bool:
        return CarModel.objects.filter(pk=car_id).exists()

    def exists_license_plate(self, license_plate: str) -> bool:
        return CarModel.objects.filter(license_plate=license_plate).exists()

    def count_operational_in_category(self, category: CarCategory) -> int:
        """Cars that count toward category capacity (Available or Rented)."""
        count = CarModel.objects.filter(
            category=category.value,
            status__in=[status.value for status in OPERATIONAL_STATUSES],
        ).count()
        logger.debug("car.category_capacity", category=category.value, operational=count)
        return count

    def lock_category(self, category: CarCategory) -> int:
        """
        Lock every car row of a category until the transaction ends

        Serializes confirmations and pick-ups competing for the same category.
        """
        locked = lock_queryset_if_possible(
            CarModel.objects.filter(category=category.value).order_by("id")
        )
        return len(list(locked.values_list("id", flat=True)))

    def list_available_in_category(self, category: CarCategory) -> List[Car]:
        """Available cars of a category ordered by id ascending."""
        rows = CarModel.objects.filter(
            category=category.value,
            status=CarStatus.AVAILABLE.value,
        ).order_by("id")
        return [self._to_domain(row) for row in rows]

    def save(self, car: Car) -> int:
        """Insert or update the row; returns the number of changed rows."""
        fields = {
            "manufacturer": car.manufacturer,
            "model": car.model,
            "license_plate": car.license_plate,
            "category": car.category.value,
            "status": car.status.value,
            "created_at": car.created_at,
        }
        updated = CarModel.objects.filter(pk=car.id).update(**fields)
        if updated:
            return updated
        CarModel.objects.create(id=car.id, **fields)
        return 1

    @staticmethod
    def _to_domain(row: CarModel) -> Car:
        return Car(
            id=row.id,
            manufacturer=row.manufacturer,
            model=row.model,
            license_plate=row.license_plate,
            category=CarCategory(row.category),
            status=CarStatus(row.status),
            created_at=row.created_at,
        )
