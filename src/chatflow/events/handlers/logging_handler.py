"""Logging event handler for observability."""

from __future__ import annotations

import structlog

from chatflow.events.types import Event, EventType, WorkflowEvent

logger = structlog.get_logger()


class LoggingEventHandler:
    """Logs every event as a structured log line.

    Deletions are logged at warning level, everything else at the
    configured default level.
    """

    def __init__(self, log_level: str = "info") -> None:
        """Initialize logging handler.

        Args:
            log_level: Default log level for events (debug, info, warning)
        """
        self.log_level = log_level

    async def handle(self, event: Event) -> None:
        """Log the event with structured data.

        Args:
            event: Event to log
        """
        log_data: dict[str, str | None] = {
            "event_type": str(event.type),
            "timestamp": event.timestamp.isoformat(),
        }
        if isinstance(event, WorkflowEvent):
            log_data["chat_workflow_id"] = str(event.chat_workflow_id)
            log_data["user_id"] = event.user_id
            log_data["display_text"] = event.display_text

        level = "warning" if event.type == EventType.CHAT_WORKFLOW_DELETED else self.log_level
        getattr(logger, level)("event_logged", **log_data)
