"""
Clock abstraction

Temporal rules (future-only bookings, expiry cutoff) read the current time
through a Clock so they stay deterministic under test.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from django.utils import timezone


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current time (timezone-aware)"""
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return timezone.now()


class FixedClock(Clock):
    """Clock frozen at a given instant until advanced explicitly."""

    def __init__(self, now: datetime):
        if timezone.is_naive(now):
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
