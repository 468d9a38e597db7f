from dataclasses import dataclass
from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from shared.application import audit
from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass
class PingCommand:
    payload: str


@dataclass(kw_only=True)
class Pinged(DomainEvent):
    payload: str
    at: datetime


def make_event():
    return Pinged(
        aggregate_id=uuid4(),
        payload="hello",
        at=datetime(2030, 5, 1, 10, tzinfo=timezone.utc),
    )


def test_command_is_dispatched_to_its_handler():
    bus = MessageBus()
    bus.register_command_handler(PingCommand, lambda command: command.payload.upper())

    assert bus.has_command_handler(PingCommand)
    assert bus.handle_command(PingCommand("ping")) == "PING"


def test_command_handler_can_be_registered_only_once():
    bus = MessageBus()
    bus.register_command_handler(PingCommand, lambda command: None)

    with pytest.raises(ValueError):
        bus.register_command_handler(PingCommand, lambda command: None)


def test_unknown_command_raises_lookup_error():
    with pytest.raises(LookupError):
        MessageBus().handle_command(PingCommand("ping"))


def test_failing_event_handler_does_not_stop_the_others():
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("handler failed")

    bus.register_event_handler(Pinged, broken)
    bus.register_event_handler(Pinged, received.append)
    bus.register_event_handler(Pinged, received.append)
    event = make_event()

    bus.publish_events([event])

    assert received == [event]


def test_event_without_handlers_is_ignored():
    MessageBus().publish_events([make_event()])


def test_failing_event_handler_is_logged(monkeypatch):
    bus_logger = MagicMock()
    monkeypatch.setattr("shared.application.message_bus.logger", bus_logger)
    bus = MessageBus()

    def broken(event):
        raise RuntimeError("handler failed")

    bus.register_event_handler(Pinged, broken)
    bus.publish_events([make_event()])

    args, kwargs = bus_logger.error.call_args
    assert args == ("bus.event.handler_failed",)
    assert kwargs["event_type"] == "Pinged"
    assert kwargs["handler"] == "broken"


def test_reset_drops_registrations():
    bus = MessageBus()
    bus.register_command_handler(PingCommand, lambda command: None)
    bus.reset()

    assert not bus.has_command_handler(PingCommand)


def test_event_to_dict_serializes_payload():
    event = make_event()

    data = event.to_dict()

    assert data["event_type"] == "Pinged"
    assert data["aggregate_id"] == str(event.aggregate_id)
    assert data["payload"] == "hello"
    assert data["at"] == "2030-05-01T10:00:00+00:00"


def test_audit_logs_every_registered_event(monkeypatch):
    audit_logger = MagicMock()
    monkeypatch.setattr(audit, "logger", audit_logger)
    bus = MessageBus()
    audit.register_audit(bus, (Pinged,))
    event = make_event()

    bus.publish_events([event])

    audit_logger.info.assert_called_once()
    args, kwargs = audit_logger.info.call_args
    assert args == ("domain_event",)
    assert kwargs["event_type"] == "Pinged"
    assert kwargs["event_id"] == str(event.event_id)
    assert kwargs["payload"] == "hello"
