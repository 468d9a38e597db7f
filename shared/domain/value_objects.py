"""
Common Value Objects

Value objects used across multiple domains:
- Period: A half-open time window [start, end) (pick-up to return)
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import ValueObject
from shared.domain.errors import InvalidPeriodError


@dataclass(frozen=True)
class Period(ValueObject):
    """
    Period value object

    Represents a time window from start (inclusive) to end (exclusive).
    Used for reservation periods and availability checks.
    A period is never mutated; changing it means replacing it.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise InvalidPeriodError("Period start and end are required")
        if self.start >= self.end:
            raise InvalidPeriodError(
                f"Period start ({self.start.isoformat()}) must be before "
                f"end ({self.end.isoformat()})"
            )

    @classmethod
    def create(cls, start: datetime, end: datetime) -> 'Period':
        return cls(start, end)

    def overlaps_with(self, other: 'Period') -> bool:
        """
        Check if this period overlaps with another

        Half-open semantics: [a, b) overlaps [c, d) iff a < d and c < b.
        Adjacent periods (one ends exactly when the other starts) don't overlap.

        Examples:
            - [1st 10:00, 5th 10:00) overlaps with [3rd 10:00, 7th 10:00) -> True
            - [1st 10:00, 5th 10:00) overlaps with [5th 10:00, 9th 10:00) -> False
        """
        if not isinstance(other, Period):
            raise TypeError("Can only check overlap with another Period")

        return self.start < other.end and other.start < self.end

    @property
    def duration(self):
        return self.end - self.start

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"Period({self.start.isoformat()}, {self.end.isoformat()})"
