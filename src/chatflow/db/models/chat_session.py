"""Chat session model."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, VARCHAR, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class ChatSession(Base):
    """One user's walk through a published chat workflow.

    Attributes:
        id: Primary key (UUID)
        user_id: External user identifier
        chat_workflow_id: Workflow being walked
        chat_workflow_item_id: Current position, None once finished
        context: Values accumulated along the walk
        expires_at: Sliding expiry, pushed forward on every update
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "chat_sessions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(VARCHAR(255), index=True)
    chat_workflow_id: Mapped[UUID] = mapped_column(
        ForeignKey("chat_workflows.id", ondelete="CASCADE"), index=True
    )
    chat_workflow_item_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("chat_workflow_items.id", ondelete="SET NULL"), default=None
    )
    context: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    expires_at: Mapped[datetime | None] = mapped_column(default=None, index=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<ChatSession(id={self.id}, user_id={self.user_id})>"
