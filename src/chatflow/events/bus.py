"""EventBus implementation for async event handling.

Provides a pub/sub mechanism for decoupling event emitters from handlers.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable

import structlog

from .types import Event, EventType

logger = structlog.get_logger()

EventHandler = Callable[[Event], Awaitable[None]]


class EventBus:
    """Async event bus with type-based routing.

    Handlers run in parallel and a failing handler never affects the
    others or the emitter.
    """

    def __init__(self) -> None:
        """Initialize empty handler registry."""
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []

    def subscribe(self, event_type: EventType | str, handler: EventHandler) -> None:
        """Subscribe handler to a specific event type.

        Args:
            event_type: Event type to subscribe to
            handler: Async function to call when event is emitted
        """
        event_key = str(event_type)
        self._handlers[event_key].append(handler)
        logger.debug("event_handler_subscribed", event_type=event_key)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe handler to all events.

        Args:
            handler: Async function to call for every event
        """
        self._global_handlers.append(handler)
        logger.debug("global_event_handler_subscribed")

    def unsubscribe(self, event_type: EventType | str, handler: EventHandler) -> bool:
        """Unsubscribe handler from a specific event type.

        Args:
            event_type: Event type to unsubscribe from
            handler: Handler to remove

        Returns:
            True if handler was found and removed
        """
        handlers = self._handlers.get(str(event_type), [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    async def emit(self, event: Event) -> None:
        """Emit an event to all subscribed handlers.

        Args:
            event: Event to emit
        """
        event_type = str(event.type)
        handlers = self._handlers.get(event_type, []) + self._global_handlers

        if not handlers:
            logger.debug("event_no_handlers", event_type=event_type)
            return

        logger.debug("event_emitting", event_type=event_type, handler_count=len(handlers))

        results = await asyncio.gather(
            *[handler(event) for handler in handlers],
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "event_handler_error",
                    event_type=event_type,
                    error=str(result),
                    error_type=type(result).__name__,
                )

    def clear(self) -> None:
        """Remove all handlers. Useful for testing."""
        self._handlers.clear()
        self._global_handlers.clear()


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus, creating it on first use.

    Returns:
        EventBus singleton
    """
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus
