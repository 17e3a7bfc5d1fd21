"""Shared async Redis connection for the chat API processes."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit, urlunsplit

import redis.asyncio as redis
import structlog

from chatflow.config import CacheSettings, get_cache_settings

logger = structlog.get_logger()


class RedisClient:
    """Pooled Redis connection with namespaced keys.

    Every key written by chatflow goes through ``key()`` so several
    deployments can share one Redis database.
    """

    def __init__(
        self,
        redis_url: str,
        max_connections: int = 20,
        key_prefix: str = "chatflow",
    ) -> None:
        """Initialize Redis client.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            max_connections: Maximum pool connections
            key_prefix: Namespace prepended to every key
        """
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.key_prefix = key_prefix
        self._pool: redis.ConnectionPool | None = None
        self._client: redis.Redis | None = None

    @classmethod
    def from_settings(cls, settings: CacheSettings) -> RedisClient:
        return cls(
            settings.redis_url,
            max_connections=settings.redis_max_connections,
            key_prefix=settings.key_prefix,
        )

    @property
    def safe_url(self) -> str:
        """Connection URL with the password hidden."""
        parts = urlsplit(self.redis_url)
        if parts.password is None:
            return self.redis_url
        host = parts.hostname or ""
        if parts.port is not None:
            host = f"{host}:{parts.port}"
        user = f"{parts.username}:***" if parts.username else "***"
        return urlunsplit(parts._replace(netloc=f"{user}@{host}"))

    def key(self, *parts: str) -> str:
        """Build a namespaced key, e.g. ``chatflow:ws:<id>``."""
        return ":".join((self.key_prefix, *parts))

    async def connect(self) -> None:
        """Open the pool and check the server answers."""
        if self._client is not None:
            return

        self._pool = redis.ConnectionPool.from_url(
            self.redis_url,
            decode_responses=True,
            max_connections=self.max_connections,
        )
        self._client = redis.Redis(connection_pool=self._pool)
        await self._client.ping()
        logger.info("redis_connected", url=self.safe_url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None
        logger.info("redis_disconnected", url=self.safe_url)

    async def ping(self) -> bool:
        """Check that Redis answers.

        Returns:
            True if Redis replied to PING

        Raises:
            RuntimeError: If not connected
        """
        return bool(await self.client.ping())

    @property
    def client(self) -> Any:
        """Underlying ``redis.asyncio.Redis``.

        Raises:
            RuntimeError: If not connected
        """
        if self._client is None:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None


_redis: RedisClient | None = None


def get_redis() -> RedisClient:
    """Get the process wide Redis client, built from CacheSettings on first use.

    Returns:
        RedisClient instance (connected by ``init_redis``)
    """
    global _redis
    if _redis is None:
        _redis = RedisClient.from_settings(get_cache_settings())
    return _redis


async def init_redis() -> RedisClient:
    """Connect the shared client (call in lifespan).

    Returns:
        Connected RedisClient
    """
    client = get_redis()
    await client.connect()
    return client


async def close_redis() -> None:
    """Close and forget the shared client (call in lifespan)."""
    global _redis
    if _redis is not None:
        await _redis.close()
        _redis = None
