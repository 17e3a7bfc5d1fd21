"""Database models for the chat workflow engine."""

from .base import Base, utcnow
from .chat_session import ChatSession
from .chat_workflow import ChatWorkflow
from .chat_workflow_interaction import ChatWorkflowInteraction
from .chat_workflow_item import DEFAULT_RESPONSE_WAIT, ChatWorkflowItem
from .chat_workflow_response import ChatWorkflowResponse
from .domain_event import DomainEvent
from .enums import ChatWorkflowItemType, ChatWorkflowResponseType, ChatWorkflowStatus

__all__ = [
    "Base",
    "utcnow",
    "ChatWorkflow",
    "ChatWorkflowItem",
    "ChatWorkflowResponse",
    "ChatSession",
    "ChatWorkflowInteraction",
    "DomainEvent",
    "ChatWorkflowStatus",
    "ChatWorkflowItemType",
    "ChatWorkflowResponseType",
    "DEFAULT_RESPONSE_WAIT",
]
