"""
Car availability

Picks or validates the concrete car handed over at pick-up. Cars of the
requested category are scanned by id ascending and the first one with
no car-specific overlap wins, so the choice is deterministic.
"""

from typing import List, Optional

import structlog

from shared.application.clock import Clock
from shared.domain.errors import StartInPastError
from shared.domain.value_objects import Period
from apps.bookings.domain.errors import InvalidLimitError
from apps.bookings.repositories import RentalRepository
from apps.cars.domain.entities import Car, CarCategory, CarStatus
from apps.cars.repositories import CarRepository

logger = structlog.get_logger(__name__)


class CarAvailabilityService:

    def __init__(self, car_repo: CarRepository, rental_repo: RentalRepository, clock: Clock):
        self.car_repo = car_repo
        self.rental_repo = rental_repo
        self.clock = clock

    # ===== Public queries =====

    def find_available_car(self, category, start, end) -> Optional[Car]:
        """First free car of the category for [start, end), or None"""
        cars = self.select_available_cars(category, start, end, limit=1)
        return cars[0] if cars else None

    def select_available_cars(self, category, start, end, limit: int) -> List[Car]:
        """
        Up to `limit` free cars of the category for [start, end)

        Raises:
            InvalidLimitError: limit is not positive
            InvalidPeriodError: start is not before end
            StartInPastError: start is not strictly in the future
        """
        if limit <= 0:
            raise InvalidLimitError(f"Limit must be greater than zero, got {limit}")
        period = Period(start, end)
        if period.start <= self.clock.now():
            raise StartInPastError(f"Period start {period.start.isoformat()} is not in the future")

        return self.select_cars(CarCategory.parse(category), period, limit)

    # ===== Selection used by pick-up =====

    def select_cars(self, category: CarCategory, period: Period, limit: int = 1) -> List[Car]:
        selected: List[Car] = []
        for car in self.car_repo.list_available_in_category(category):
            if self.rental_repo.car_has_overlap(car.id, period):
                logger.debug("availability.car_busy", car_id=str(car.id), period=str(period))
                continue
            selected.append(car)
            if len(selected) >= limit:
                break
        return selected

    def first_free_car(self, category: CarCategory, period: Period) -> Optional[Car]:
        cars = self.select_cars(category, period, limit=1)
        return cars[0] if cars else None

    def is_car_free(self, car: Car, category: CarCategory, period: Period) -> bool:
        """Explicitly requested car: right category, AVAILABLE, no overlap"""
        if car.category != category or car.status != CarStatus.AVAILABLE:
            return False
        return not self.rental_repo.car_has_overlap(car.id, period)
