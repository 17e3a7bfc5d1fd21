"""Chat workflow item repository."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.chat_workflow_item import ChatWorkflowItem
from .base import BaseRepository


class ChatWorkflowItemRepository(BaseRepository[ChatWorkflowItem]):
    """Repository for ChatWorkflowItem model operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chat workflow item repository.

        Args:
            session: Database session
        """
        super().__init__(ChatWorkflowItem, session)

    async def get_by_workflow(self, chat_workflow_id: UUID) -> list[ChatWorkflowItem]:
        """Get all items of a workflow in creation order.

        Args:
            chat_workflow_id: Workflow UUID

        Returns:
            List of items
        """
        stmt = (
            select(ChatWorkflowItem)
            .where(ChatWorkflowItem.chat_workflow_id == chat_workflow_id)
            .order_by(ChatWorkflowItem.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_by_workflow(self, chat_workflow_id: UUID) -> None:
        """Delete every item of a workflow.

        Args:
            chat_workflow_id: Workflow UUID
        """
        await self.session.execute(
            delete(ChatWorkflowItem)
            .where(ChatWorkflowItem.chat_workflow_id == chat_workflow_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
