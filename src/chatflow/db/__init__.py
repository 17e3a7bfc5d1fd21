"""Database package for the chat workflow engine."""

from .models.base import Base
from .session import (
    DatabaseSessionManager,
    close_db,
    get_db_session,
    get_session_manager,
    init_db,
)

__all__ = [
    "Base",
    "DatabaseSessionManager",
    "close_db",
    "get_db_session",
    "get_session_manager",
    "init_db",
]
