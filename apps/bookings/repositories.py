"""ORM-backed repositories for the Reservation and Rental aggregates."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

import structlog
from django.db.models import Exists, OuterRef  # type: ignore

from apps.bookings.domain.entities import (
    Rental,
    RentalStatus,
    Reservation,
    ReservationStatus,
)
from apps.bookings.models import Rental as RentalModel
from apps.bookings.models import Reservation as ReservationModel
from apps.cars.domain.entities import CarCategory
from shared.domain.value_objects import Period
from shared.infrastructure.querysets import lock_queryset_if_possible, overlap_q

logger = structlog.get_logger(__name__)


class ReservationRepository:

    def get_by_id(self, reservation_id: UUID, lock: bool = False) -> Optional[Reservation]:
        queryset = ReservationModel.objects.filter(pk=reservation_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        row = queryset.first()
        return self._to_domain(row) if row else None

    def exists(self, reservation_id: UUID) -> bool:
        return ReservationModel.objects.filter(pk=reservation_id).exists()

    def count_confirmed_overlapping(
        self,
        car_category: CarCategory,
        period: Period,
        ignore_reservation_id: UUID | None = None,
    ) -> int:
        """Other CONFIRMED reservations of the category overlapping `period`."""
        queryset = ReservationModel.objects.filter(
            car_category=car_category.value,
            status=ReservationStatus.CONFIRMED.value,
        ).filter(overlap_q("period_start", "period_end", period.start, period.end))

        if ignore_reservation_id is not None:
            queryset = queryset.exclude(pk=ignore_reservation_id)

        count = queryset.count()
        logger.debug(
            "reservation.confirmed_overlapping",
            category=car_category.value,
            period=str(period),
            count=count,
        )
        return count

    def select_drafts_to_expire(self, cutoff: datetime) -> List[Reservation]:
        """DRAFT reservations created at or before `cutoff`, oldest first."""
        queryset = lock_queryset_if_possible(
            ReservationModel.objects.filter(
                status=ReservationStatus.DRAFT.value,
                created_at__lte=cutoff,
            ).order_by("created_at", "id")
        )
        return [self._to_domain(row) for row in queryset]

    def save(self, reservation: Reservation) -> int:
        fields = {
            "customer_id": reservation.customer_id,
            "car_category": reservation.car_category.value,
            "period_start": reservation.period.start,
            "period_end": reservation.period.end,
            "status": reservation.status.value,
            "created_at": reservation.created_at,
            "confirmed_at": reservation.confirmed_at,
            "cancelled_at": reservation.cancelled_at,
            "expired_at": reservation.expired_at,
            "rental_id": reservation.rental_id,
        }
        updated = ReservationModel.objects.filter(pk=reservation.id).update(**fields)
        if updated:
            return updated
        ReservationModel.objects.create(id=reservation.id, **fields)
        return 1

    @staticmethod
    def _to_domain(row: ReservationModel) -> Reservation:
        return Reservation(
            id=row.id,
            customer_id=row.customer_id,
            car_category=CarCategory(row.car_category),
            period=Period(row.period_start, row.period_end),
            status=ReservationStatus(row.status),
            created_at=row.created_at,
            confirmed_at=row.confirmed_at,
            cancelled_at=row.cancelled_at,
            expired_at=row.expired_at,
            rental_id=row.rental_id,
        )


class RentalRepository:

    def get_by_id(self, rental_id: UUID, lock: bool = False) -> Optional[Rental]:
        queryset = RentalModel.objects.filter(pk=rental_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        row = queryset.first()
        return self._to_domain(row) if row else None

    def exists_for_reservation(self, reservation_id: UUID) -> bool:
        return RentalModel.objects.filter(reservation_id=reservation_id).exists()

    def car_has_overlap(self, car_id: UUID, period: Period) -> bool:
        """
        Car-specific overlap check

        True iff an ACTIVE rental of the car belongs to a CONFIRMED
        reservation whose period overlaps `period`.
        """
        confirmed_overlapping = ReservationModel.objects.filter(
            pk=OuterRef("reservation_id"),
            status=ReservationStatus.CONFIRMED.value,
        ).filter(overlap_q("period_start", "period_end", period.start, period.end))

        return RentalModel.objects.filter(
            car_id=car_id,
            status=RentalStatus.ACTIVE.value,
        ).filter(Exists(confirmed_overlapping)).exists()

    def save(self, rental: Rental) -> int:
        fields = {
            "reservation_id": rental.reservation_id,
            "customer_id": rental.customer_id,
            "car_id": rental.car_id,
            "status": rental.status.value,
            "pickup_at": rental.pickup_at,
            "fuel_level_out": rental.fuel_level_out,
            "km_out": rental.km_out,
            "return_at": rental.return_at,
            "fuel_level_in": rental.fuel_level_in,
            "km_in": rental.km_in,
        }
        updated = RentalModel.objects.filter(pk=rental.id).update(**fields)
        if updated:
            return updated
        RentalModel.objects.create(id=rental.id, **fields)
        return 1

    @staticmethod
    def _to_domain(row: RentalModel) -> Rental:
        return Rental(
            id=row.id,
            reservation_id=row.reservation_id,
            customer_id=row.customer_id,
            car_id=row.car_id,
            status=RentalStatus(row.status),
            pickup_at=row.pickup_at,
            fuel_level_out=row.fuel_level_out,
            km_out=row.km_out,
            return_at=row.return_at,
            fuel_level_in=row.fuel_level_in,
            km_in=row.km_in,
        )
