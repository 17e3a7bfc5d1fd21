"""WebSocket frame schemas for the chat transport."""

from __future__ import annotations

from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class WSMessageType(StrEnum):
    """Control frame types carried in a ``type`` field."""

    PING = "ping"
    PONG = "pong"


class WSErrorMessage(StrEnum):
    """Fixed error texts sent to chat clients."""

    UNPARSABLE = "unable to parse chat WebSocket response"
    NO_SESSION = "no current chat session"
    NO_ITEM = "no current chat workflow item"
    SESSION_IN_USE = "chat session already has an open connection"


class ChatWebSocketResponse(BaseModel):
    """Inbound frame: the user's answer to the current item."""

    chat_workflow_response_id: UUID | None = None
    input: str | None = None


class ChatItemFrame(BaseModel):
    """Outbound frame: the item the session is positioned on.

    ``chat_workflow_item`` is None and ``responses`` empty once the
    conversation has reached its end.
    """

    chat_workflow_item: dict[str, Any] | None = None
    responses: list[dict[str, Any]] = Field(default_factory=list)


class ChatErrorFrame(BaseModel):
    """Outbound frame reporting a failed inbound message."""

    error: str
