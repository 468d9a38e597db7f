"""Audit trail for published domain events."""

import structlog

from shared.domain.base import DomainEvent

logger = structlog.get_logger("audit")


def audit_event(event: DomainEvent):
    """Write one structured log line per published event."""
    payload = event.to_dict()
    event_type = payload.pop('event_type')
    logger.info("domain_event", event_type=event_type, **payload)


def register_audit(bus, event_types):
    for event_type in event_types:
        bus.register_event_handler(event_type, audit_event)
