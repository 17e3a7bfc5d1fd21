"""Event type definitions for the event bus."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

__all__ = [
    "EventType",
    "Event",
    "WorkflowEvent",
]


class EventType(StrEnum):
    """All event types in the system."""

    # Chat workflow lifecycle
    CHAT_WORKFLOW_CREATED = "chat_workflow.created"
    CHAT_WORKFLOW_PUBLISHED = "chat_workflow.published"
    CHAT_WORKFLOW_DELETED = "chat_workflow.deleted"


class Event(BaseModel):
    """Base event emitted on the bus.

    Attributes:
        type: Event type
        timestamp: When the event happened (UTC)
    """

    type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class WorkflowEvent(Event):
    """A change to a chat workflow, mirrored by a domain_events row.

    Attributes:
        chat_workflow_id: Affected workflow
        user_id: Acting user, if known
        display_text: Human readable summary
        payload: Rendered workflow snapshot
    """

    chat_workflow_id: UUID
    user_id: str | None = None
    display_text: str
    payload: dict[str, Any] = Field(default_factory=dict)
