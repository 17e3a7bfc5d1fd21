"""WebSocket connection manager for chat sessions."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from chatflow.cache import ChatConnectionCache

logger = structlog.get_logger()


@dataclass
class Connection:
    """Represents a chat WebSocket connection."""

    id: str
    websocket: WebSocket
    user_id: str
    chat_session_id: UUID | None = None
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        """Record inbound activity from the client."""
        self.last_activity = time.monotonic()

    def idle_for(self) -> float:
        """Seconds since the last inbound activity."""
        return time.monotonic() - self.last_activity


@dataclass
class ConnectionManager:
    """Tracks open chat connections and the chat session each one serves."""

    cache: ChatConnectionCache | None = None
    _connections: dict[str, Connection] = field(default_factory=dict)
    _session_connections: dict[UUID, set[str]] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def connect(self, websocket: WebSocket, user_id: str) -> Connection:
        """Accept a new WebSocket connection.

        Args:
            websocket: WebSocket connection
            user_id: Authenticated user ID

        Returns:
            Connection object
        """
        await websocket.accept()

        connection = Connection(id=str(uuid4()), websocket=websocket, user_id=user_id)
        async with self._lock:
            self._connections[connection.id] = connection

        logger.info(
            "ws_connected",
            connection_id=connection.id,
            user_id=user_id,
            total_connections=self.get_total_connections(),
        )
        return connection

    async def attach_session(self, connection: Connection, chat_session_id: UUID) -> None:
        """Bind a connection to the chat session it is driving.

        Args:
            connection: Connection to bind
            chat_session_id: Chat session served by the connection
        """
        if connection.chat_session_id == chat_session_id:
            return

        async with self._lock:
            self._forget_session(connection)
            connection.chat_session_id = chat_session_id
            self._session_connections.setdefault(chat_session_id, set()).add(connection.id)

        if self.cache is not None:
            await self.cache.register_ws_connection(chat_session_id, connection.id)

        logger.info(
            "ws_session_attached",
            connection_id=connection.id,
            chat_session_id=str(chat_session_id),
            session_connections=self.get_session_connection_count(chat_session_id),
        )

    async def session_taken(self, connection: Connection, chat_session_id: UUID) -> bool:
        """Check whether another connection already drives a chat session.

        Uses the Redis registry when configured so connections held by other
        API processes count too.

        Args:
            connection: Connection asking to drive the session
            chat_session_id: Chat session UUID

        Returns:
            True if a different live connection is registered for the session
        """
        if self.cache is not None:
            owners = await self.cache.get_ws_connections(chat_session_id)
        else:
            owners = set(self._session_connections.get(chat_session_id, set()))
        owners.discard(connection.id)
        return bool(owners)

    async def refresh(self, connection: Connection) -> None:
        """Keep the connection's registry entry from expiring."""
        if self.cache is not None and connection.chat_session_id is not None:
            await self.cache.register_ws_connection(connection.chat_session_id, connection.id)

    async def disconnect(self, connection: Connection) -> None:
        """Handle connection disconnect.

        Args:
            connection: Connection to remove
        """
        async with self._lock:
            self._connections.pop(connection.id, None)
            chat_session_id = self._forget_session(connection)

        if self.cache is not None and chat_session_id is not None:
            await self.cache.unregister_ws_connection(chat_session_id, connection.id)

        logger.info(
            "ws_disconnected",
            connection_id=connection.id,
            chat_session_id=str(chat_session_id) if chat_session_id else None,
        )

    def _forget_session(self, connection: Connection) -> UUID | None:
        chat_session_id = connection.chat_session_id
        if chat_session_id is not None:
            session_conns = self._session_connections.get(chat_session_id)
            if session_conns:
                session_conns.discard(connection.id)
                if not session_conns:
                    del self._session_connections[chat_session_id]
        return chat_session_id

    async def send_json(self, connection: Connection, payload: dict[str, Any]) -> bool:
        """Send a JSON frame to a connection.

        Args:
            connection: Target connection
            payload: Frame to send

        Returns:
            True if sent successfully
        """
        try:
            await connection.websocket.send_json(payload)
            return True
        except WebSocketDisconnect:
            return False
        except RuntimeError as e:
            # Starlette raises RuntimeError when sending on a closed socket
            logger.warning("ws_send_failed", connection_id=connection.id, error=str(e))
            return False

    def get_session_connection_count(self, chat_session_id: UUID) -> int:
        """Get number of connections for a chat session."""
        return len(self._session_connections.get(chat_session_id, set()))

    def get_total_connections(self) -> int:
        """Get total number of active connections."""
        return len(self._connections)
