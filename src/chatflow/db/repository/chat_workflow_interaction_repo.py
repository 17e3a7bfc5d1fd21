"""Chat workflow interaction repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.chat_workflow_interaction import ChatWorkflowInteraction
from .base import BaseRepository


class ChatWorkflowInteractionRepository(BaseRepository[ChatWorkflowInteraction]):
    """Repository for the append-only interaction log."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize interaction repository.

        Args:
            session: Database session
        """
        super().__init__(ChatWorkflowInteraction, session)

    async def get_by_chat_session(self, chat_session_id: UUID) -> list[ChatWorkflowInteraction]:
        """Get the interactions of a session in the order they happened.

        Args:
            chat_session_id: Chat session UUID

        Returns:
            List of interactions
        """
        stmt = (
            select(ChatWorkflowInteraction)
            .where(ChatWorkflowInteraction.chat_session_id == chat_session_id)
            .order_by(ChatWorkflowInteraction.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
