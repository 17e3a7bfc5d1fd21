"""Chat workflow repository."""

from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.chat_workflow import ChatWorkflow
from .base import BaseRepository


class ChatWorkflowRepository(BaseRepository[ChatWorkflow]):
    """Repository for ChatWorkflow model operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chat workflow repository.

        Args:
            session: Database session
        """
        super().__init__(ChatWorkflow, session)

    async def get_by_name(self, name: str) -> ChatWorkflow | None:
        """Get workflow by its unique name.

        Args:
            name: Workflow name

        Returns:
            Workflow or None if not found
        """
        stmt = select(ChatWorkflow).where(ChatWorkflow.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_name(self, limit: int = 100, offset: int = 0) -> list[ChatWorkflow]:
        """List workflows ordered by name.

        Args:
            limit: Maximum number of workflows to return
            offset: Number of workflows to skip

        Returns:
            List of workflows
        """
        stmt = select(ChatWorkflow).order_by(ChatWorkflow.name).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def name_in_use(self, name: str, exclude_id: UUID | None = None) -> bool:
        """Check whether another workflow already uses a name.

        Args:
            name: Candidate name
            exclude_id: Workflow to ignore (the one being updated)

        Returns:
            True if the name is taken
        """
        condition = ChatWorkflow.name == name
        if exclude_id is not None:
            condition = condition & (ChatWorkflow.id != exclude_id)
        result = await self.session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def is_initial_item(self, item_id: UUID) -> bool:
        """Check whether an item is the entry point of any workflow.

        Args:
            item_id: Item UUID

        Returns:
            True if some workflow starts at this item
        """
        stmt = select(exists().where(ChatWorkflow.initial_chat_workflow_item_id == item_id))
        result = await self.session.execute(stmt)
        return bool(result.scalar())
