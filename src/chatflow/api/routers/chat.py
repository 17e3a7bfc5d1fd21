"""Chat WebSocket endpoint."""

from fastapi import APIRouter, Query, WebSocket

from chatflow.cache import ChatConnectionCache, get_redis

from ..websocket import ChatWebSocketHandler, ConnectionManager

router = APIRouter(prefix="/chat", tags=["chat"])

# Global connection manager instance
_manager: ConnectionManager | None = None


def get_ws_manager() -> ConnectionManager:
    """Get or create the chat WebSocket connection manager.

    Returns:
        ConnectionManager singleton
    """
    global _manager
    if _manager is None:
        _manager = ConnectionManager(cache=ChatConnectionCache(get_redis()))
    return _manager


def set_ws_manager(manager: ConnectionManager | None) -> None:
    """Set the chat WebSocket connection manager (for testing).

    Args:
        manager: Manager instance to use, None to reset
    """
    global _manager
    _manager = manager


@router.websocket("/ws")
async def chat_websocket(
    websocket: WebSocket,
    token: str | None = Query(default=None),
) -> None:
    """Drive the current user's active chat session.

    Server -> Client:
        - {"chat_workflow_item": {...}, "responses": [...]} on connect and
          after every accepted answer; the item is null once the
          conversation is over
        - {"error": "..."} when an answer is rejected
        - {"error": "chat session already has an open connection"} followed
          by close code 4009 when another connection holds the session
        - {"type": "ping"} every heartbeat interval

    Client -> Server:
        - {"chat_workflow_response_id": "<uuid>" | null, "input": "<text>" | null}
        - {"type": "pong"} or {"type": "ping"}

    Args:
        websocket: WebSocket connection
        token: JWT identifying the user
    """
    handler = ChatWebSocketHandler(manager=get_ws_manager())
    await handler.handle_connection(websocket, token=token)
