"""
Car Domain Entities

- CarCategory: the class of vehicle a customer reserves
- CarStatus: FSM states for a car's operational lifecycle
- Car: fleet aggregate
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from shared.domain.base import Aggregate
from shared.domain.errors import InvalidInputError, InvalidStatusTransitionError
from shared.domain.identifiers import resolve_id
from apps.cars.domain.errors import (
    CarNotAvailableError,
    CarRetiredError,
    InvalidCategoryError,
    InvalidLicensePlateError,
)
from apps.cars.domain.events import CarRegistered, CarStatusChanged

LICENSE_PLATE_PATTERN = re.compile(r'^[A-Z0-9-]+$')


class CarCategory(Enum):
    ECONOMY = 'economy'
    COMPACT = 'compact'
    MIDSIZE = 'midsize'
    SUV = 'suv'

    @classmethod
    def parse(cls, value) -> 'CarCategory':
        """Accept a member, its value or its name (case-insensitive)"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        raise InvalidCategoryError(f"Unknown car category: {value!r}")


class CarStatus(Enum):
    """
    Car Status Finite State Machine

    State transitions:
    - AVAILABLE -> RENTED (pick-up)
    - RENTED -> AVAILABLE (return)
    - AVAILABLE -> MAINTENANCE
    - MAINTENANCE -> AVAILABLE
    - any non-retired -> RETIRED (terminal)
    """
    AVAILABLE = 'available'
    RENTED = 'rented'
    MAINTENANCE = 'maintenance'
    RETIRED = 'retired'


# Cars that count toward category capacity
OPERATIONAL_STATUSES = frozenset({CarStatus.AVAILABLE, CarStatus.RENTED})


@dataclass(kw_only=True, eq=False)
class Car(Aggregate):
    """
    Car Aggregate Root

    Status only changes through the named transition methods; a retired
    car never changes again. Cars are never deleted.
    """
    manufacturer: str
    model: str
    license_plate: str
    category: CarCategory
    created_at: datetime
    status: CarStatus = CarStatus.AVAILABLE

    @classmethod
    def create(
        cls,
        manufacturer: str,
        model: str,
        license_plate: str,
        category,
        created_at: datetime,
        id=None,
    ) -> 'Car':
        """
        Register a new car in AVAILABLE status

        Text fields are trimmed and must not be empty; the license plate
        must consist of upper-case A-Z, 0-9 and '-'.
        """
        manufacturer = (manufacturer or '').strip()
        model = (model or '').strip()
        license_plate = (license_plate or '').strip()

        if not manufacturer:
            raise InvalidInputError("Manufacturer is required", code='manufacturer_required')
        if not model:
            raise InvalidInputError("Model is required", code='model_required')
        if not license_plate:
            raise InvalidInputError("License plate is required", code='license_plate_required')
        if not LICENSE_PLATE_PATTERN.match(license_plate):
            raise InvalidLicensePlateError(f"Invalid license plate: {license_plate!r}")

        car = cls(
            id=resolve_id(id),
            manufacturer=manufacturer,
            model=model,
            license_plate=license_plate,
            category=CarCategory.parse(category),
            created_at=created_at,
        )
        car.add_event(CarRegistered(
            aggregate_id=car.id,
            car_id=car.id,
            category=car.category.value,
            license_plate=car.license_plate,
        ))
        return car

    @property
    def is_retired(self) -> bool:
        return self.status == CarStatus.RETIRED

    @property
    def is_operational(self) -> bool:
        return self.status in OPERATIONAL_STATUSES

    def _transition(self, required: CarStatus, target: CarStatus, error_cls):
        if self.is_retired:
            raise CarRetiredError(f"Car {self.license_plate} is retired")
        if self.status != required:
            raise error_cls(
                f"Cannot move car {self.license_plate} from {self.status.value} "
                f"to {target.value}; car must be {required.value}"
            )
        self._set_status(target)

    def _set_status(self, target: CarStatus):
        old_status = self.status
        self.status = target
        self.add_event(CarStatusChanged(
            aggregate_id=self.id,
            car_id=self.id,
            old_status=old_status.value,
            new_status=target.value,
        ))

    def mark_as_rented(self):
        """AVAILABLE -> RENTED"""
        self._transition(CarStatus.AVAILABLE, CarStatus.RENTED, CarNotAvailableError)

    def mark_as_available(self):
        """RENTED -> AVAILABLE"""
        self._transition(CarStatus.RENTED, CarStatus.AVAILABLE, InvalidStatusTransitionError)

    def send_to_maintenance(self):
        """AVAILABLE -> MAINTENANCE"""
        self._transition(CarStatus.AVAILABLE, CarStatus.MAINTENANCE, InvalidStatusTransitionError)

    def return_from_maintenance(self):
        """MAINTENANCE -> AVAILABLE"""
        self._transition(CarStatus.MAINTENANCE, CarStatus.AVAILABLE, InvalidStatusTransitionError)

    def retire(self):
        """Any state -> RETIRED; retiring a retired car is a no-op"""
        if self.is_retired:
            return
        self._set_status(CarStatus.RETIRED)

    def __str__(self):
        return f"Car {self.license_plate} ({self.status.value})"
