"""API routers for endpoint organization."""

from .chat import router as chat_router
from .chat_sessions import router as chat_sessions_router
from .chat_workflow_items import router as chat_workflow_items_router
from .chat_workflow_responses import router as chat_workflow_responses_router
from .chat_workflows import router as chat_workflows_router
from .health import router as health_router

__all__ = [
    "health_router",
    "chat_workflows_router",
    "chat_workflow_items_router",
    "chat_workflow_responses_router",
    "chat_sessions_router",
    "chat_router",
]
