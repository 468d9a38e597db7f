"""Fleet models."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Car(models.Model):
    """A vehicle of the rental fleet."""

    class Category(models.TextChoices):
        ECONOMY = "economy", _("Economy")
        COMPACT = "compact", _("Compact")
        MIDSIZE = "midsize", _("Midsize")
        SUV = "suv", _("SUV")

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        RENTED = "rented", _("Rented")
        MAINTENANCE = "maintenance", _("In maintenance")
        RETIRED = "retired", _("Retired")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    manufacturer = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    license_plate = models.CharField(max_length=20, unique=True)
    category = models.CharField(max_length=16, choices=Category.choices)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    created_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Car")
        verbose_name_plural = _("Cars")
        ordering = ["id"]
        indexes = [
            models.Index(fields=["category", "status"], name="car_category_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.manufacturer} {self.model} ({self.license_plate})"
