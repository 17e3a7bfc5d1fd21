"""Chat session repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.chat_session import ChatSession
from ..models.chat_workflow import ChatWorkflow
from ..models.enums import ChatWorkflowStatus
from .base import BaseRepository


class ChatSessionRepository(BaseRepository[ChatSession]):
    """Repository for ChatSession model operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chat session repository.

        Args:
            session: Database session
        """
        super().__init__(ChatSession, session)

    async def get_active_for_user(
        self,
        user_id: str,
        now: datetime,
        chat_workflow_id: UUID | None = None,
    ) -> ChatSession | None:
        """Get the most recent unexpired session of a user on a published workflow.

        Args:
            user_id: External user identifier
            now: Reference time for expiry
            chat_workflow_id: Optional workflow filter

        Returns:
            Active session or None
        """
        stmt = (
            select(ChatSession)
            .join(ChatWorkflow, ChatWorkflow.id == ChatSession.chat_workflow_id)
            .where(
                ChatSession.user_id == user_id,
                ChatWorkflow.status == ChatWorkflowStatus.PUBLISHED.value,
                ChatSession.expires_at >= now,
            )
        )
        if chat_workflow_id is not None:
            stmt = stmt.where(ChatSession.chat_workflow_id == chat_workflow_id)
        stmt = stmt.order_by(ChatSession.created_at.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def clear_item(self, chat_workflow_item_id: UUID) -> None:
        """Detach sessions currently positioned on an item.

        Args:
            chat_workflow_item_id: Item UUID
        """
        await self.session.execute(
            update(ChatSession)
            .where(ChatSession.chat_workflow_item_id == chat_workflow_item_id)
            .values(chat_workflow_item_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()

    async def delete_by_workflow(self, chat_workflow_id: UUID) -> None:
        """Delete every session of a workflow.

        Args:
            chat_workflow_id: Workflow UUID
        """
        await self.session.execute(
            delete(ChatSession)
            .where(ChatSession.chat_workflow_id == chat_workflow_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
