"""Chat workflow item model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import INTEGER, TEXT, VARCHAR, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow
from .enums import (
    AVAILABLE_RESPONSE_TYPES,
    ChatWorkflowItemType,
    ChatWorkflowResponseType,
)

DEFAULT_RESPONSE_WAIT = 10


class ChatWorkflowItem(Base):
    """A node of a chat workflow graph.

    Attributes:
        id: Primary key (UUID)
        chat_workflow_id: Owning workflow
        item_type: message, question, render or done
        message: Optional message template shown to the user
        render_type: Opaque tag telling the client what to render
        response_wait: Seconds the client waits before auto-advancing
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "chat_workflow_items"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    chat_workflow_id: Mapped[UUID] = mapped_column(
        ForeignKey("chat_workflows.id", ondelete="CASCADE"), index=True
    )
    item_type: Mapped[str] = mapped_column(VARCHAR(20))
    message: Mapped[str | None] = mapped_column(TEXT, default=None)
    render_type: Mapped[str | None] = mapped_column(VARCHAR(255), default=None)
    response_wait: Mapped[int] = mapped_column(INTEGER, default=DEFAULT_RESPONSE_WAIT)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    @property
    def type(self) -> ChatWorkflowItemType:
        return ChatWorkflowItemType(self.item_type)

    def available_response_types(self) -> list[ChatWorkflowResponseType]:
        """Response types this item may carry."""
        return list(AVAILABLE_RESPONSE_TYPES[self.type])

    def __repr__(self) -> str:
        return f"<ChatWorkflowItem(id={self.id}, item_type={self.item_type})>"
