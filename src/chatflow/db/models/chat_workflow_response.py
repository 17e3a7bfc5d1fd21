"""Chat workflow response model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import INTEGER, TEXT, VARCHAR, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow
from .enums import ChatWorkflowResponseType


class ChatWorkflowResponse(Base):
    """A directed, ranked edge leaving a chat workflow item.

    Attributes:
        id: Primary key (UUID)
        chat_workflow_item_id: Source item
        response_type: noop or answer
        response: Optional reply template
        answer_value: Value matched against user input (unique per item)
        next_chat_workflow_item_id: Target item, None ends the conversation
        rank: Dense 1-based order among the source item's responses
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "chat_workflow_responses"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    chat_workflow_item_id: Mapped[UUID] = mapped_column(
        ForeignKey("chat_workflow_items.id", ondelete="CASCADE"), index=True
    )
    response_type: Mapped[str] = mapped_column(VARCHAR(20))
    response: Mapped[str | None] = mapped_column(TEXT, default=None)
    answer_value: Mapped[str | None] = mapped_column(VARCHAR(255), default=None)
    next_chat_workflow_item_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("chat_workflow_items.id", ondelete="SET NULL"),
        default=None,
        index=True,
    )
    rank: Mapped[int] = mapped_column(INTEGER, default=1)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    @property
    def type(self) -> ChatWorkflowResponseType:
        return ChatWorkflowResponseType(self.response_type)

    def __repr__(self) -> str:
        return (
            f"<ChatWorkflowResponse(id={self.id}, response_type={self.response_type}, "
            f"rank={self.rank})>"
        )
