"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.

Mutations are staged explicitly with `register()` and written by a
single `commit(label)` call at the end of a use case. Anything that is
not committed when the block exits is rolled back.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

import structlog
from django.db import IntegrityError, transaction

from shared.domain.base import DomainEvent
from shared.domain.errors import AlreadyExistsError

logger = structlog.get_logger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None or not self.committed:
            self.rollback()

    @property
    @abstractmethod
    def committed(self) -> bool:
        pass

    @abstractmethod
    def register(self, repository, aggregate):
        """Stage an aggregate to be written by `repository` on commit"""
        pass

    @abstractmethod
    def commit(self, label: str = '') -> int:
        """Write all staged aggregates, returning the number of changed rows"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Opens a `transaction.atomic()` block, collects staged aggregates and
    flushes them in one go when `commit()` is called. Domain events are
    published with `transaction.on_commit()` once the database commit succeeds.

    Usage:
        with DjangoUnitOfWork() as uow:
            # Load aggregate
            reservation = reservation_repo.get_by_id(reservation_id, lock=True)

            # Execute domain logic
            reservation.confirm(clock.now())

            # Stage and commit once
            uow.register(reservation_repo, reservation)
            uow.commit("Reservation confirmed")
        # Events are published after commit
    """

    def __init__(self):
        self._staged: List[Tuple[object, object]] = []
        self._events: List[DomainEvent] = []
        self._transaction = None
        self._committed = False

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)
                self._transaction = None

    @property
    def committed(self) -> bool:
        return self._committed

    def register(self, repository, aggregate):
        if self._committed:
            raise RuntimeError("Unit of work is already committed")
        if not any(staged is aggregate for _, staged in self._staged):
            self._staged.append((repository, aggregate))

    def commit(self, label: str = '') -> int:
        """
        Flush staged aggregates and schedule event publishing

        A unique constraint violation is reported as AlreadyExistsError;
        the surrounding block then rolls the whole transaction back.
        """
        if self._committed:
            raise RuntimeError("Unit of work is already committed")

        rows = 0
        try:
            for repository, aggregate in self._staged:
                rows += repository.save(aggregate)
        except IntegrityError as exc:
            logger.warning("uow.commit.integrity_error", label=label, error=str(exc))
            raise AlreadyExistsError(
                f"{label or 'Commit'} violates a uniqueness constraint",
                code='unique_violation',
            ) from exc

        for _, aggregate in self._staged:
            self.collect_events(aggregate)

        self._committed = True
        logger.info(
            "uow.commit",
            label=label,
            aggregates=len(self._staged),
            rows=rows,
            events=len(self._events),
        )

        # Copy events before clearing
        events = self._events.copy()
        self._events.clear()
        self._staged.clear()

        # Schedule event publishing after commit
        if events:
            transaction.on_commit(lambda: self._publish_events(events))

        return rows

    def rollback(self):
        """Rollback changes and discard events"""
        if self._staged or self._events:
            logger.warning(
                "uow.rollback",
                staged=len(self._staged),
                events=len(self._events),
            )
        self._staged.clear()
        self._events.clear()
        if self._transaction is not None:
            transaction.set_rollback(True)

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Extracts all domain events from the aggregate and
        clears them from the aggregate.
        """
        if hasattr(aggregate, 'events'):
            new_events = aggregate.events
            if new_events:
                self._events.extend(new_events)
                aggregate.clear_events()

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit.
        """
        from shared.application.message_bus import message_bus

        logger.info("uow.publish_events", count=len(events))
        message_bus.publish_events(events)
