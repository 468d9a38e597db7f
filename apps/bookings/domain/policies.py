"""
Reservation Conflict Policy

Decides whether a period can be confirmed for a car category. Cars are
bound only at pick-up, so confirmation is guarded by counting: the number
of other confirmed reservations overlapping the period must stay below
the number of operational cars in the category.
"""

from enum import Enum
from uuid import UUID

import structlog

from shared.domain.value_objects import Period

logger = structlog.get_logger(__name__)


class ReservationConflict(Enum):
    NONE = 'none'
    NO_CATEGORY_CAPACITY = 'no_category_capacity'
    OVER_CAPACITY = 'over_capacity'


class ReservationConflictPolicy:
    """
    Category capacity check

    Returns a ReservationConflict value; it never raises for a conflict.
    """

    def __init__(self, car_repo, reservation_repo):
        self.car_repo = car_repo
        self.reservation_repo = reservation_repo

    def check(self, car_category, period: Period, ignore_reservation_id: UUID | None = None) -> ReservationConflict:
        capacity = self.car_repo.count_operational_in_category(car_category)
        if capacity <= 0:
            conflict = ReservationConflict.NO_CATEGORY_CAPACITY
            overlapping = 0
        else:
            overlapping = self.reservation_repo.count_confirmed_overlapping(
                car_category,
                period,
                ignore_reservation_id=ignore_reservation_id,
            )
            conflict = (
                ReservationConflict.OVER_CAPACITY
                if overlapping >= capacity
                else ReservationConflict.NONE
            )

        logger.debug(
            "policy.capacity",
            category=car_category.value,
            capacity=capacity,
            overlapping=overlapping,
            conflict=conflict.value,
        )
        return conflict
