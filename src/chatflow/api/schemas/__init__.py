"""Pydantic schemas for API request/response validation."""

from .requests import (
    ChatSessionCreate,
    ChatWorkflowCreate,
    ChatWorkflowItemCreate,
    ChatWorkflowItemUpdate,
    ChatWorkflowResponseCreate,
    ChatWorkflowResponseUpdate,
    ChatWorkflowUpdate,
)
from .responses import (
    ChatInteractionResponse,
    ChatSessionResponse,
    DomainEventResponse,
    ErrorResponse,
    WorkflowDetailResponse,
    WorkflowEdgeResponse,
    WorkflowItemDetailResponse,
    WorkflowItemResponse,
    WorkflowResponse,
)
from .websocket import (
    ChatErrorFrame,
    ChatItemFrame,
    ChatWebSocketResponse,
    WSErrorMessage,
    WSMessageType,
)

__all__ = [
    # Requests
    "ChatWorkflowCreate",
    "ChatWorkflowUpdate",
    "ChatWorkflowItemCreate",
    "ChatWorkflowItemUpdate",
    "ChatWorkflowResponseCreate",
    "ChatWorkflowResponseUpdate",
    "ChatSessionCreate",
    # Responses
    "WorkflowResponse",
    "WorkflowDetailResponse",
    "WorkflowItemResponse",
    "WorkflowItemDetailResponse",
    "WorkflowEdgeResponse",
    "ChatSessionResponse",
    "ChatInteractionResponse",
    "DomainEventResponse",
    "ErrorResponse",
    # WebSocket
    "WSMessageType",
    "WSErrorMessage",
    "ChatWebSocketResponse",
    "ChatItemFrame",
    "ChatErrorFrame",
]
