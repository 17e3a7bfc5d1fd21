"""Registry of open chat WebSocket connections, shared through Redis.

Every API process records which connection drives which chat session so a
second connection to the same session can be refused, whichever process
holds the first one. Entries expire unless the owning connection keeps
refreshing them, so a crashed process cannot lock a session for long.
"""

from __future__ import annotations

from uuid import UUID

import structlog

from chatflow.config import get_cache_settings

from .redis_client import RedisClient

logger = structlog.get_logger()


class ChatConnectionCache:
    """WebSocket connection ids per chat session."""

    def __init__(self, redis_client: RedisClient, ttl: int | None = None) -> None:
        """Initialize connection cache.

        Args:
            redis_client: Redis client instance
            ttl: Registry TTL in seconds, from CacheSettings when None
        """
        self._redis = redis_client
        self.ttl = ttl if ttl is not None else get_cache_settings().ws_connection_ttl

    def _key(self, chat_session_id: UUID) -> str:
        return self._redis.key("ws", "connections", str(chat_session_id))

    async def register_ws_connection(self, chat_session_id: UUID, connection_id: str) -> None:
        """Record a connection for a chat session and restart the TTL.

        Also called on every heartbeat to keep the entry alive.

        Args:
            chat_session_id: Chat session UUID
            connection_id: Unique connection identifier
        """
        key = self._key(chat_session_id)
        await self._redis.client.sadd(key, connection_id)
        await self._redis.client.expire(key, self.ttl)

    async def unregister_ws_connection(self, chat_session_id: UUID, connection_id: str) -> None:
        """Forget a connection.

        Args:
            chat_session_id: Chat session UUID
            connection_id: Unique connection identifier
        """
        await self._redis.client.srem(self._key(chat_session_id), connection_id)
        logger.debug(
            "ws_connection_unregistered",
            chat_session_id=str(chat_session_id),
            connection_id=connection_id,
        )

    async def get_ws_connections(self, chat_session_id: UUID) -> set[str]:
        """Get the connection ids registered for a chat session.

        Args:
            chat_session_id: Chat session UUID

        Returns:
            Set of connection IDs
        """
        return set(await self._redis.client.smembers(self._key(chat_session_id)))
