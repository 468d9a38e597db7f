"""Celery tasks for the booking domain."""

from __future__ import annotations

import structlog
from celery import shared_task  # type: ignore

from shared.application.message_bus import message_bus
from apps.bookings.application.command_handlers import ExpireReservationsCommand

logger = structlog.get_logger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_draft_reservations")
def expire_draft_reservations() -> dict[str, int]:
    """
    Expire stale draft reservations.

    Dispatches the expiry batch through the message bus; the batch commits
    once and skips drafts that fail individually.

    Returns:
        dict: {"expired": number of expired reservations}
    """
    expired = message_bus.handle_command(ExpireReservationsCommand())

    if expired > 0:
        logger.info("task.expire_draft_reservations", expired=expired)

    return {"expired": expired}
