"""
Message Bus

Central hub for routing commands and events to their handlers.
Commands come from callers outside the booking core (Celery tasks,
management commands, a future HTTP layer); events come from the
unit of work after a successful commit.
"""

from typing import Any, Callable, Dict, List, Type

import structlog

from shared.domain.base import DomainEvent

logger = structlog.get_logger(__name__)


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1)
    Events: Multiple handlers per event (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        """
        Register an event handler

        Multiple handlers can be registered for the same event type.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        """
        Register a command handler

        Only one handler can be registered per command type.
        """
        if command_type in self._command_handlers:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def handle_command(self, command: Any) -> Any:
        """
        Handle a command

        Returns the result from the command handler.
        Raises LookupError if no handler is registered.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise LookupError(
                f"No handler registered for command {command_type.__name__}"
            )

        logger.debug("bus.command", command=command_type.__name__)
        return handler(command)

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Events are published after commit, so a failing handler is logged
        and does not stop the other handlers.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug("bus.event.unhandled", event_type=event_type.__name__)
                continue

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        "bus.event.handler_failed",
                        event_type=event_type.__name__,
                        handler=getattr(handler, '__name__', repr(handler)),
                        error=str(e),
                        exc_info=True,
                    )

    def reset(self):
        """Drop every registration (used when rewiring in tests)"""
        self._event_handlers.clear()
        self._command_handlers.clear()


# Global message bus instance
message_bus = MessageBus()
