"""In-process event bus for chat workflow lifecycle events."""

from .bus import EventBus, EventHandler, get_event_bus
from .handlers import LoggingEventHandler
from .types import Event, EventType, WorkflowEvent

__all__ = [
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "LoggingEventHandler",
    "Event",
    "EventType",
    "WorkflowEvent",
]
