"""Chat WebSocket transport."""

from .handlers import ChatWebSocketHandler
from .manager import Connection, ConnectionManager

__all__ = ["ChatWebSocketHandler", "Connection", "ConnectionManager"]
