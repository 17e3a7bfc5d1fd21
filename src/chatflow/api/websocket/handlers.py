"""Chat WebSocket protocol: pushes the current item, applies user answers."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator, Callable
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.config import ChatSettings, get_chat_settings
from chatflow.db.models import ChatSession
from chatflow.db.repository import ChatWorkflowResponseRepository
from chatflow.db.session import get_db_session
from chatflow.workflow import (
    BusinessProcessError,
    ChatSessionRuntime,
    ResponseProcessor,
    StorageError,
    render_template,
)
from chatflow.workflow.processor import RESPONSE_NOT_VALID
from chatflow.workflow.tree import item_attributes, response_attributes

from ..auth import authenticate_websocket
from ..exceptions import AuthenticationError
from ..schemas import (
    ChatErrorFrame,
    ChatItemFrame,
    ChatWebSocketResponse,
    WSErrorMessage,
    WSMessageType,
)
from .manager import Connection, ConnectionManager

logger = structlog.get_logger()

SessionProvider = Callable[[], AsyncGenerator[AsyncSession, None]]


class ChatWebSocketHandler:
    """Runs one chat WebSocket connection.

    A reader task applies inbound answers in arrival order while a
    heartbeat task pings the client and closes the connection once the
    client has been silent for longer than the configured timeout. Every
    inbound frame is handled in a fresh database session.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        settings: ChatSettings | None = None,
        db_session_provider: SessionProvider = get_db_session,
    ) -> None:
        """Initialize handler.

        Args:
            manager: Connection manager
            settings: Heartbeat and timeout settings
            db_session_provider: Async generator yielding database sessions
        """
        self.manager = manager
        self.settings = settings or get_chat_settings()
        self.db_session_provider = db_session_provider

    async def handle_connection(self, websocket: WebSocket, token: str | None = None) -> None:
        """Handle a chat WebSocket connection lifecycle.

        Args:
            websocket: WebSocket connection
            token: JWT from the query string
        """
        if not token:
            await websocket.close(code=4001, reason="Token required")
            return

        try:
            user_id = await authenticate_websocket(token)
        except AuthenticationError as e:
            logger.warning("ws_auth_failed", error=e.message)
            await websocket.close(code=4003, reason="Authentication failed")
            return

        connection = await self.manager.connect(websocket, user_id)

        try:
            claimed = True
            async for db in self.db_session_provider():
                claimed = await self._send_initial_item(connection, db)
            if claimed:
                await self._run(connection)
        except WebSocketDisconnect:
            logger.debug("ws_client_disconnected", connection_id=connection.id)
        except Exception as e:
            logger.exception("ws_handler_error", connection_id=connection.id, error=str(e))
        finally:
            await self.manager.disconnect(connection)

    async def _run(self, connection: Connection) -> None:
        reader = asyncio.create_task(self._read_loop(connection))
        heartbeat = asyncio.create_task(self._heartbeat_loop(connection))

        done, pending = await asyncio.wait(
            {reader, heartbeat}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            task.result()

    async def _heartbeat_loop(self, connection: Connection) -> None:
        """Ping the client until it goes silent for too long."""
        while True:
            await asyncio.sleep(self.settings.heartbeat_interval)

            if connection.idle_for() > self.settings.client_timeout:
                logger.info(
                    "ws_client_timeout",
                    connection_id=connection.id,
                    idle_seconds=round(connection.idle_for(), 1),
                )
                await connection.websocket.close(
                    code=status.WS_1001_GOING_AWAY, reason="Client timeout"
                )
                return

            await self.manager.refresh(connection)
            if not await self.manager.send_json(connection, {"type": WSMessageType.PING.value}):
                return

    async def _read_loop(self, connection: Connection) -> None:
        """Process inbound frames one at a time."""
        while True:
            message = await connection.websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(code=message.get("code", status.WS_1000_NORMAL_CLOSURE))

            connection.touch()
            raw = message.get("text")
            if raw is None and message.get("bytes") is not None:
                raw = message["bytes"].decode("utf-8", errors="replace")
            await self._handle_message(connection, raw or "")

    async def _handle_message(self, connection: Connection, raw: str) -> None:
        """Route one inbound frame.

        Args:
            connection: Source connection
            raw: Frame text
        """
        try:
            data = json.loads(raw)
        except ValueError:
            await self._send_error(connection, WSErrorMessage.UNPARSABLE)
            return

        if isinstance(data, dict) and data.get("type") in (
            WSMessageType.PING.value,
            WSMessageType.PONG.value,
        ):
            if data["type"] == WSMessageType.PING.value:
                await self.manager.send_json(connection, {"type": WSMessageType.PONG.value})
            return

        try:
            answer = ChatWebSocketResponse.model_validate(data)
        except PydanticValidationError:
            await self._send_error(connection, WSErrorMessage.UNPARSABLE)
            return

        async for db in self.db_session_provider():
            await self._apply_answer(connection, db, answer)

    async def _apply_answer(
        self,
        connection: Connection,
        db: AsyncSession,
        answer: ChatWebSocketResponse,
    ) -> None:
        runtime = ChatSessionRuntime(db)
        session = await runtime.find_active_for_user(connection.user_id)
        if session is None:
            await self._send_error(connection, WSErrorMessage.NO_SESSION)
            return
        if not await self._claim_session(connection, session):
            return

        item = await runtime.current_item(session)
        if item is None:
            await self._send_error(connection, WSErrorMessage.NO_ITEM)
            return

        chosen = None
        if answer.chat_workflow_response_id is not None:
            chosen = await ChatWorkflowResponseRepository(db).get_by_id(
                answer.chat_workflow_response_id
            )
            if chosen is None:
                await self._send_error(connection, RESPONSE_NOT_VALID)
                return

        processor = ResponseProcessor(db, runtime)
        try:
            await processor.process_response(session, item, chosen, answer.input)
        except BusinessProcessError as e:
            await self._send_error(connection, e.message)
            return
        except StorageError:
            await connection.websocket.close(
                code=status.WS_1011_INTERNAL_ERROR, reason="Storage failure"
            )
            raise WebSocketDisconnect(code=status.WS_1011_INTERNAL_ERROR) from None

        await self._push_item(connection, db, runtime, session)

    async def _send_initial_item(self, connection: Connection, db: AsyncSession) -> bool:
        """Push the active session's current item.

        Returns:
            False if the connection was refused and closed
        """
        runtime = ChatSessionRuntime(db)
        session = await runtime.find_active_for_user(connection.user_id)
        if session is None:
            await self._send_error(connection, WSErrorMessage.NO_SESSION)
            return True

        if not await self._claim_session(connection, session):
            await connection.websocket.close(code=4009, reason="Chat session already connected")
            return False

        if session.chat_workflow_item_id is None:
            await self._send_error(connection, WSErrorMessage.NO_ITEM)
        else:
            await self._push_item(connection, db, runtime, session)
        return True

    async def _claim_session(self, connection: Connection, session: ChatSession) -> bool:
        """Attach the connection unless another one drives the session."""
        if connection.chat_session_id == session.id:
            return True
        if await self.manager.session_taken(connection, session.id):
            await self._send_error(connection, WSErrorMessage.SESSION_IN_USE)
            return False
        await self.manager.attach_session(connection, session.id)
        return True

    async def _push_item(
        self,
        connection: Connection,
        db: AsyncSession,
        runtime: ChatSessionRuntime,
        session: ChatSession,
    ) -> None:
        """Send the session's current item with its templated responses."""
        item = await runtime.current_item(session)
        if item is None:
            frame = ChatItemFrame()
        else:
            context = session.context or {}
            item_display = item_attributes(item)
            item_display["message"] = render_template(item.message, context)

            responses: list[dict[str, Any]] = []
            for response in await ChatWorkflowResponseRepository(db).get_by_item(item.id):
                display = response_attributes(response)
                display["response"] = render_template(response.response, context)
                responses.append(display)

            frame = ChatItemFrame(chat_workflow_item=item_display, responses=responses)

        await self.manager.send_json(connection, frame.model_dump(mode="json"))

    async def _send_error(self, connection: Connection, message: str) -> None:
        """Send an error frame.

        Args:
            connection: Target connection
            message: Error text
        """
        logger.info("ws_chat_error", connection_id=connection.id, error=str(message))
        await self.manager.send_json(connection, ChatErrorFrame(error=str(message)).model_dump())
