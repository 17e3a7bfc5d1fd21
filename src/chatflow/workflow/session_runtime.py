"""Per-user chat session state: position, context and sliding expiry."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.config import get_chat_settings
from chatflow.db.models import (
    ChatSession,
    ChatWorkflowInteraction,
    ChatWorkflowItem,
    utcnow,
)
from chatflow.db.repository import (
    ChatSessionRepository,
    ChatWorkflowInteractionRepository,
    ChatWorkflowItemRepository,
    ChatWorkflowRepository,
)

from .errors import BusinessProcessError, NotFoundError, translate_storage_errors

logger = structlog.get_logger()

SESSION_EDITABLE = frozenset({"chat_workflow_item_id", "context"})


class ChatSessionRuntime:
    """Starts, finds and advances chat sessions.

    Every successful update pushes ``expires_at`` forward by the session
    TTL; an expired session can no longer be updated.
    """

    def __init__(self, db: AsyncSession, session_ttl: timedelta | None = None) -> None:
        """Initialize chat session runtime.

        Args:
            db: Database session
            session_ttl: Sliding expiry window, from ChatSettings when None
        """
        self.db = db
        if session_ttl is None:
            session_ttl = timedelta(minutes=get_chat_settings().session_ttl_minutes)
        self.session_ttl = session_ttl
        self.sessions = ChatSessionRepository(db)
        self.workflows = ChatWorkflowRepository(db)
        self.items = ChatWorkflowItemRepository(db)
        self.interactions = ChatWorkflowInteractionRepository(db)

    def _expiry(self) -> datetime:
        return utcnow() + self.session_ttl

    @staticmethod
    def is_expired(session: ChatSession, now: datetime | None = None) -> bool:
        """Check whether a session has expired.

        A session without ``expires_at`` never expires.

        Args:
            session: Chat session
            now: Reference time, defaults to the current UTC time

        Returns:
            True if the session is past its expiry
        """
        if session.expires_at is None:
            return False
        return session.expires_at < (now or utcnow())

    @translate_storage_errors
    async def create(
        self,
        user_id: str,
        chat_workflow_id: UUID,
        context: dict[str, Any] | None = None,
    ) -> ChatSession:
        """Start a session positioned on the workflow's initial item.

        Args:
            user_id: External user identifier
            chat_workflow_id: Workflow to walk
            context: Initial context values

        Returns:
            Created session

        Raises:
            NotFoundError: If the workflow does not exist
            BusinessProcessError: If the workflow is a draft, has no initial
                item, or the user already has an active session on it
        """
        workflow = await self.workflows.get_by_id(chat_workflow_id)
        if workflow is None:
            raise NotFoundError("ChatWorkflow", chat_workflow_id)
        if not workflow.is_published:
            raise BusinessProcessError(
                "Unable to start chat session, workflow is in draft status"
            )
        if workflow.initial_chat_workflow_item_id is None:
            raise BusinessProcessError(
                "Unable to start chat session, workflow does not have an initial workflow item"
            )

        ongoing = await self.sessions.get_active_for_user(
            user_id, utcnow(), chat_workflow_id=chat_workflow_id
        )
        if ongoing is not None:
            raise BusinessProcessError("Could not create chat session as one is already ongoing")

        session = await self.sessions.create(
            user_id=user_id,
            chat_workflow_id=chat_workflow_id,
            chat_workflow_item_id=workflow.initial_chat_workflow_item_id,
            context=dict(context or {}),
            expires_at=self._expiry(),
        )
        await self.db.commit()

        logger.info(
            "chat_session_created",
            chat_session_id=str(session.id),
            chat_workflow_id=str(chat_workflow_id),
            user_id=user_id,
        )
        return session

    async def find(self, session_id: UUID) -> ChatSession:
        session = await self.sessions.get_by_id(session_id)
        if session is None:
            raise NotFoundError("ChatSession", session_id)
        return session

    async def find_active_for_user(self, user_id: str) -> ChatSession | None:
        """Most recent unexpired session of a user on a published workflow.

        Args:
            user_id: External user identifier

        Returns:
            Active session or None
        """
        return await self.sessions.get_active_for_user(user_id, utcnow())

    async def current_item(self, session: ChatSession) -> ChatWorkflowItem | None:
        if session.chat_workflow_item_id is None:
            return None
        return await self.items.get_by_id(session.chat_workflow_item_id)

    async def interactions_for(self, session: ChatSession) -> list[ChatWorkflowInteraction]:
        return await self.interactions.get_by_chat_session(session.id)

    @translate_storage_errors
    async def update(
        self,
        session: ChatSession,
        commit: bool = True,
        **attrs: Any,
    ) -> ChatSession:
        """Update a session and extend its expiry.

        Args:
            session: Session to update
            commit: Commit the transaction; pass False to batch with other writes
            **attrs: chat_workflow_item_id and/or context

        Returns:
            Updated session

        Raises:
            BusinessProcessError: If the session has expired
        """
        unknown = set(attrs) - SESSION_EDITABLE
        if unknown:
            raise ValueError(f"Unsupported chat session attributes: {sorted(unknown)}")
        if self.is_expired(session):
            raise BusinessProcessError("Unable to update chat session as it has expired")

        session = await self.sessions.update_instance(
            session, **attrs, expires_at=self._expiry()
        )
        if commit:
            await self.db.commit()
        return session

    async def add_value_to_context(
        self,
        session: ChatSession,
        key: str,
        value: Any,
        commit: bool = True,
    ) -> ChatSession:
        """Merge one value into the session context.

        Args:
            session: Session to update
            key: Context key
            value: Value stored under key
            commit: Commit the transaction

        Returns:
            Updated session
        """
        context = dict(session.context or {})
        context[key] = value
        return await self.update(session, commit=commit, context=context)
