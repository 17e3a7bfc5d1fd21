"""Request schemas for API endpoints.

Update schemas are applied with ``exclude_unset`` so that an explicit
``null`` clears a field while an omitted field is left alone.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from chatflow.db.models.enums import ChatWorkflowItemType, ChatWorkflowResponseType


class ChatWorkflowCreate(BaseModel):
    """Request schema for creating a chat workflow."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique workflow name")


class ChatWorkflowUpdate(BaseModel):
    """Request schema for updating a chat workflow."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    initial_chat_workflow_item_id: UUID | None = Field(
        default=None,
        description="Entry item of the workflow; null clears it",
    )


class ChatWorkflowItemCreate(BaseModel):
    """Request schema for adding an item to a workflow."""

    chat_workflow_id: UUID
    item_type: ChatWorkflowItemType
    message: str | None = Field(default=None, description="Message template")
    render_type: str | None = Field(default=None, max_length=255)
    response_wait: int | None = Field(default=None, ge=0, description="Seconds")


class ChatWorkflowItemUpdate(BaseModel):
    """Request schema for updating an item."""

    message: str | None = None
    render_type: str | None = Field(default=None, max_length=255)
    response_wait: int | None = Field(default=None, ge=0)


class ChatWorkflowResponseCreate(BaseModel):
    """Request schema for adding a response to an item."""

    chat_workflow_item_id: UUID
    response_type: ChatWorkflowResponseType
    response: str | None = Field(default=None, description="Reply template")
    answer_value: str | None = Field(default=None, max_length=255)
    next_chat_workflow_item_id: UUID | None = None
    rank: int | None = Field(default=None, ge=1, description="Appended when omitted")


class ChatWorkflowResponseUpdate(BaseModel):
    """Request schema for updating a response."""

    response_type: ChatWorkflowResponseType | None = None
    response: str | None = None
    answer_value: str | None = Field(default=None, max_length=255)
    next_chat_workflow_item_id: UUID | None = None
    rank: int | None = Field(default=None, ge=1)


class ChatSessionCreate(BaseModel):
    """Request schema for starting a chat session."""

    chat_workflow_id: UUID
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Initial context values",
    )
