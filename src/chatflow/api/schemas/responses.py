"""Response schemas for API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class WorkflowResponse(BaseModel):
    """Response schema for chat workflow data."""

    id: UUID
    name: str
    status: str
    initial_chat_workflow_item_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkflowDetailResponse(WorkflowResponse):
    """Chat workflow with its rendered graph."""

    tree: dict[str, Any] = Field(default_factory=dict)


class WorkflowItemResponse(BaseModel):
    """Response schema for chat workflow item data."""

    id: UUID
    chat_workflow_id: UUID
    item_type: str
    message: str | None = None
    render_type: str | None = None
    response_wait: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkflowItemDetailResponse(WorkflowItemResponse):
    """Chat workflow item with the graph reachable from it."""

    tree: list[dict[str, Any]] = Field(default_factory=list)


class WorkflowEdgeResponse(BaseModel):
    """Response schema for a chat workflow response (graph edge)."""

    id: UUID
    chat_workflow_item_id: UUID
    response_type: str
    response: str | None = None
    answer_value: str | None = None
    next_chat_workflow_item_id: UUID | None = None
    rank: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChatSessionResponse(BaseModel):
    """Response schema for chat session data."""

    id: UUID
    user_id: str
    chat_workflow_id: UUID
    chat_workflow_item_id: UUID | None = None
    context: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error: str = Field(description="Error message")
    detail: str | None = Field(default=None, description="Detailed error information")
    code: str = Field(description="Error code (e.g., HTTP_404)")
    request_id: str = Field(description="Request ID for tracking")
    errors: dict[str, list[str]] | None = Field(
        default=None,
        description="Field-scoped validation messages",
    )


class ChatInteractionResponse(BaseModel):
    """Response schema for one logged transition."""

    id: UUID
    chat_workflow_item_id: UUID
    chat_workflow_response_id: UUID
    chat_session_id: UUID
    input: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DomainEventResponse(BaseModel):
    """Response schema for one audit event."""

    id: UUID
    event_type: str
    display_text: str
    user_id: str | None = None
    event_data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
