"""Domain event model."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class DomainEvent(Base):
    """Durable audit record of a change made through the graph store.

    Attributes:
        id: Primary key (UUID)
        event_type: Dotted event name (e.g. chat_workflow.published)
        display_text: Human readable summary
        main_table: Table of the affected record
        main_id: Id of the affected record
        user_id: Acting user, if known
        event_data: Snapshot payload
        created_at: Creation timestamp
    """

    __tablename__ = "domain_events"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    event_type: Mapped[str] = mapped_column(VARCHAR(100), index=True)
    display_text: Mapped[str] = mapped_column(TEXT)
    main_table: Mapped[str] = mapped_column(VARCHAR(100))
    main_id: Mapped[UUID] = mapped_column(index=True)
    user_id: Mapped[str | None] = mapped_column(VARCHAR(255), default=None)
    event_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    def __repr__(self) -> str:
        return f"<DomainEvent(id={self.id}, event_type={self.event_type})>"
