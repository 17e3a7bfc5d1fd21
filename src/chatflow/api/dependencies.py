"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.db.session import get_db_session
from chatflow.events import get_event_bus
from chatflow.workflow import ChatSessionRuntime, GraphStore

from .auth import get_current_user_id


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency.

    Yields:
        AsyncSession for database operations
    """
    async for session in get_db_session():
        yield session


def get_graph_store(db: AsyncSession = Depends(get_db)) -> GraphStore:
    """Graph store bound to the request's database session."""
    return GraphStore(db, event_bus=get_event_bus())


def get_session_runtime(db: AsyncSession = Depends(get_db)) -> ChatSessionRuntime:
    """Chat session runtime bound to the request's database session."""
    return ChatSessionRuntime(db)


# Type aliases for cleaner route signatures
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
Store = Annotated[GraphStore, Depends(get_graph_store)]
Runtime = Annotated[ChatSessionRuntime, Depends(get_session_runtime)]
