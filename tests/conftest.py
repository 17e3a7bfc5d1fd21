"""
Pytest configuration and fixtures
"""

import os

# Settings are cached on first use; pin them before chatflow is imported
os.environ.setdefault("AUTH_AUTH_ENABLED", "false")
os.environ.setdefault("API_JSON_LOGS", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from chatflow.db.session import DatabaseSessionManager  # noqa: E402
from chatflow.workflow import ChatSessionRuntime, GraphStore  # noqa: E402


@pytest.fixture
async def db_manager() -> AsyncGenerator[DatabaseSessionManager, None]:
    """In-memory sqlite database with every table created."""
    manager = DatabaseSessionManager(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
async def db(db_manager: DatabaseSessionManager) -> AsyncGenerator[AsyncSession, None]:
    """Database session on the in-memory database."""
    async with db_manager.session_factory() as session:
        yield session


@pytest.fixture
def store(db: AsyncSession) -> GraphStore:
    """Graph store without an event bus."""
    return GraphStore(db)


@pytest.fixture
def runtime(db: AsyncSession) -> ChatSessionRuntime:
    """Chat session runtime on the test database."""
    return ChatSessionRuntime(db)
