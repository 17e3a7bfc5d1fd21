"""Async database session factory and utilities."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models.base import Base


class DatabaseSessionManager:
    """Manages database engine and session creation.

    A single instance is shared across the application through the
    module-level helpers below.

    Attributes:
        engine: SQLAlchemy async engine instance
        session_factory: Factory for creating async sessions
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        **engine_kwargs: Any,
    ) -> None:
        """Initialize database session manager.

        Args:
            database_url: Async connection URL (postgresql+asyncpg:// in
                production, sqlite+aiosqlite:// for local runs and tests)
            pool_size: Number of persistent connections in the pool
            max_overflow: Max additional connections beyond pool_size
            **engine_kwargs: Additional arguments passed to create_async_engine
        """
        if make_url(database_url).get_backend_name() != "sqlite":
            engine_kwargs.setdefault("pool_size", pool_size)
            engine_kwargs.setdefault("max_overflow", max_overflow)
            engine_kwargs.setdefault("pool_recycle", 3600)

        self.engine: AsyncEngine = create_async_engine(
            database_url,
            pool_pre_ping=True,
            **engine_kwargs,
        )
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )

    async def close(self) -> None:
        """Close database engine and all connections."""
        if self.engine:
            await self.engine.dispose()

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session.

        Yields:
            AsyncSession: Database session instance
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create all tables defined in Base metadata.

        Used by tests and local sqlite runs. In production,
        use Alembic migrations instead.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        """Drop all tables defined in Base metadata.

        WARNING: This will delete all data. Only use for testing.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


# Global session manager instance (initialized via init_db())
session_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs: Any) -> DatabaseSessionManager:
    """Initialize the global database session manager.

    Args:
        database_url: Async database connection URL
        **kwargs: Passed through to DatabaseSessionManager

    Returns:
        The initialized session manager

    Raises:
        RuntimeError: If already initialized
    """
    global session_manager
    if session_manager is not None:
        raise RuntimeError("DatabaseSessionManager already initialized")
    session_manager = DatabaseSessionManager(database_url, **kwargs)
    return session_manager


async def close_db() -> None:
    """Close the global database session manager."""
    global session_manager
    if session_manager is not None:
        await session_manager.close()
        session_manager = None


def get_session_manager() -> DatabaseSessionManager:
    """Get the global session manager instance.

    Returns:
        DatabaseSessionManager: Global session manager

    Raises:
        RuntimeError: If session manager is not initialized
    """
    if session_manager is None:
        raise RuntimeError(
            "DatabaseSessionManager not initialized. "
            "Call init_db() first in your application startup."
        )
    return session_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions.

    Yields:
        AsyncSession: Database session instance
    """
    manager = get_session_manager()
    async for session in manager.get_session():
        yield session
