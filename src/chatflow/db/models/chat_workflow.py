"""Chat workflow model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import VARCHAR, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow
from .enums import ChatWorkflowStatus


class ChatWorkflow(Base):
    """Named, versionless conversation graph authored by an editor.

    Attributes:
        id: Primary key (UUID)
        name: Unique workflow name
        status: draft or published
        initial_chat_workflow_item_id: Entry point of the graph
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "chat_workflows"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(VARCHAR(255), unique=True)
    status: Mapped[str] = mapped_column(
        VARCHAR(20), default=ChatWorkflowStatus.DRAFT.value, index=True
    )
    initial_chat_workflow_item_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(
            "chat_workflow_items.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_chat_workflows_initial_item",
        ),
        default=None,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    @property
    def is_published(self) -> bool:
        return self.status == ChatWorkflowStatus.PUBLISHED.value

    def __repr__(self) -> str:
        return f"<ChatWorkflow(id={self.id}, name={self.name}, status={self.status})>"
