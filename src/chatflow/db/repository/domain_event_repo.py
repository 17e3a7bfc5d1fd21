"""Domain event repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.domain_event import DomainEvent
from .base import BaseRepository


class DomainEventRepository(BaseRepository[DomainEvent]):
    """Repository for DomainEvent model operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize domain event repository.

        Args:
            session: Database session
        """
        super().__init__(DomainEvent, session)

    async def get_by_main_id(
        self, main_id: UUID, event_type: str | None = None
    ) -> list[DomainEvent]:
        """Get the events recorded against a record, oldest first.

        Args:
            main_id: Id of the affected record
            event_type: Optional event type filter

        Returns:
            List of events
        """
        stmt = select(DomainEvent).where(DomainEvent.main_id == main_id)
        if event_type is not None:
            stmt = stmt.where(DomainEvent.event_type == event_type)
        result = await self.session.execute(stmt.order_by(DomainEvent.created_at))
        return list(result.scalars().all())
