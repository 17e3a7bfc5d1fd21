"""Database repository layer."""

from .base import BaseRepository
from .chat_session_repo import ChatSessionRepository
from .chat_workflow_interaction_repo import ChatWorkflowInteractionRepository
from .chat_workflow_item_repo import ChatWorkflowItemRepository
from .chat_workflow_repo import ChatWorkflowRepository
from .chat_workflow_response_repo import ChatWorkflowResponseRepository
from .domain_event_repo import DomainEventRepository

__all__ = [
    "BaseRepository",
    "ChatWorkflowRepository",
    "ChatWorkflowItemRepository",
    "ChatWorkflowResponseRepository",
    "ChatSessionRepository",
    "ChatWorkflowInteractionRepository",
    "DomainEventRepository",
]
