"""Chat workflow interaction model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import TEXT
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class ChatWorkflowInteraction(Base):
    """Append-only record of one transition taken in a chat session.

    Ids are stored without foreign keys so the log survives edits and
    deletion of the graph or the session.

    Attributes:
        id: Primary key (UUID)
        chat_workflow_item_id: Item the user was on
        chat_workflow_response_id: Response that was taken
        chat_session_id: Session the transition belongs to
        input: Raw user input, if any
        created_at: Creation timestamp
    """

    __tablename__ = "chat_workflow_interactions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    chat_workflow_item_id: Mapped[UUID] = mapped_column(index=True)
    chat_workflow_response_id: Mapped[UUID] = mapped_column()
    chat_session_id: Mapped[UUID] = mapped_column(index=True)
    input: Mapped[str | None] = mapped_column(TEXT, default=None)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)

    def __repr__(self) -> str:
        return (
            f"<ChatWorkflowInteraction(id={self.id}, "
            f"chat_session_id={self.chat_session_id})>"
        )
