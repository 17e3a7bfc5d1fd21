"""Chat workflow response repository."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.chat_workflow_response import ChatWorkflowResponse
from .base import BaseRepository


class ChatWorkflowResponseRepository(BaseRepository[ChatWorkflowResponse]):
    """Repository for ChatWorkflowResponse model operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chat workflow response repository.

        Args:
            session: Database session
        """
        super().__init__(ChatWorkflowResponse, session)

    async def get_by_item(self, chat_workflow_item_id: UUID) -> list[ChatWorkflowResponse]:
        """Get the responses of an item ordered by rank.

        Args:
            chat_workflow_item_id: Source item UUID

        Returns:
            List of responses
        """
        stmt = (
            select(ChatWorkflowResponse)
            .where(ChatWorkflowResponse.chat_workflow_item_id == chat_workflow_item_id)
            .order_by(ChatWorkflowResponse.rank)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_items(self, item_ids: Iterable[UUID]) -> list[ChatWorkflowResponse]:
        """Get the responses of several items ordered by source and rank.

        Args:
            item_ids: Source item UUIDs

        Returns:
            List of responses
        """
        ids = list(item_ids)
        if not ids:
            return []
        stmt = (
            select(ChatWorkflowResponse)
            .where(ChatWorkflowResponse.chat_workflow_item_id.in_(ids))
            .order_by(ChatWorkflowResponse.chat_workflow_item_id, ChatWorkflowResponse.rank)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def answer_value_in_use(
        self,
        chat_workflow_item_id: UUID,
        answer_value: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """Check whether a sibling response already uses an answer value.

        Args:
            chat_workflow_item_id: Source item UUID
            answer_value: Candidate value
            exclude_id: Response to ignore (the one being updated)

        Returns:
            True if the value is taken
        """
        condition = (ChatWorkflowResponse.chat_workflow_item_id == chat_workflow_item_id) & (
            ChatWorkflowResponse.answer_value == answer_value
        )
        if exclude_id is not None:
            condition = condition & (ChatWorkflowResponse.id != exclude_id)
        result = await self.session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def shift_ranks(
        self,
        chat_workflow_item_id: UUID,
        delta: int,
        min_rank: int | None = None,
        max_rank: int | None = None,
        exclude_id: UUID | None = None,
    ) -> None:
        """Add delta to the rank of siblings within an inclusive rank window.

        Args:
            chat_workflow_item_id: Source item UUID
            delta: Amount added to each rank (+1 or -1)
            min_rank: Lowest rank affected, unbounded if None
            max_rank: Highest rank affected, unbounded if None
            exclude_id: Response left untouched (the one being moved)
        """
        stmt = update(ChatWorkflowResponse).where(
            ChatWorkflowResponse.chat_workflow_item_id == chat_workflow_item_id
        )
        if min_rank is not None:
            stmt = stmt.where(ChatWorkflowResponse.rank >= min_rank)
        if max_rank is not None:
            stmt = stmt.where(ChatWorkflowResponse.rank <= max_rank)
        if exclude_id is not None:
            stmt = stmt.where(ChatWorkflowResponse.id != exclude_id)
        await self.session.execute(
            stmt.values(rank=ChatWorkflowResponse.rank + delta).execution_options(
                synchronize_session="fetch"
            )
        )
        await self.session.flush()

    async def clear_next_item(self, next_chat_workflow_item_id: UUID) -> None:
        """Turn every edge pointing at an item into a terminal edge.

        Args:
            next_chat_workflow_item_id: Target item UUID
        """
        await self.session.execute(
            update(ChatWorkflowResponse)
            .where(ChatWorkflowResponse.next_chat_workflow_item_id == next_chat_workflow_item_id)
            .values(next_chat_workflow_item_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()

    async def delete_by_items(self, item_ids: Iterable[UUID]) -> None:
        """Delete every response leaving the given items.

        Args:
            item_ids: Source item UUIDs
        """
        ids = list(item_ids)
        if not ids:
            return
        await self.session.execute(
            delete(ChatWorkflowResponse)
            .where(ChatWorkflowResponse.chat_workflow_item_id.in_(ids))
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
