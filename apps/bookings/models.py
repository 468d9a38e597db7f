"""Booking models: reservations and the rentals created at pick-up."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Reservation(models.Model):
    """Intent to rent a car category for a period."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        EXPIRED = "expired", _("Expired")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer_id = models.UUIDField(db_index=True)
    car_category = models.CharField(max_length=16)
    period_start = models.DateTimeField()
    period_end = models.DateTimeField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    created_at = models.DateTimeField()
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)
    rental_id = models.UUIDField(null=True, blank=True, unique=True)

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(period_end__gt=models.F("period_start")),
                name="reservation_valid_period",
            ),
        ]
        indexes = [
            models.Index(fields=["car_category", "status", "period_start", "period_end"], name="reservation_overlap_idx"),
            models.Index(fields=["status", "created_at"], name="reservation_expiry_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.id} ({self.status})"


class Rental(models.Model):
    """A car handed over for a confirmed reservation."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        RETURNED = "returned", _("Returned")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reservation_id = models.UUIDField(unique=True)
    customer_id = models.UUIDField(db_index=True)
    car_id = models.UUIDField(db_index=True)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    pickup_at = models.DateTimeField()
    fuel_level_out = models.PositiveSmallIntegerField()
    km_out = models.PositiveIntegerField()
    return_at = models.DateTimeField(null=True, blank=True)
    fuel_level_in = models.PositiveSmallIntegerField(null=True, blank=True)
    km_in = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = _("Rental")
        verbose_name_plural = _("Rentals")
        ordering = ["pickup_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(fuel_level_out__lte=100),
                name="rental_fuel_out_range",
            ),
            models.CheckConstraint(
                condition=models.Q(fuel_level_in__isnull=True) | models.Q(fuel_level_in__lte=100),
                name="rental_fuel_in_range",
            ),
            models.CheckConstraint(
                condition=models.Q(km_in__isnull=True) | models.Q(km_in__gte=models.F("km_out")),
                name="rental_km_not_decreasing",
            ),
        ]
        indexes = [
            models.Index(fields=["car_id", "status"], name="rental_car_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Rental {self.id} ({self.status})"
