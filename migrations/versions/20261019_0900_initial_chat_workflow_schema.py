"""initial_chat_workflow_schema

Revision ID: 20261019_0900
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_0900"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create chat workflow graph, session and audit tables."""
    op.create_table(
        "chat_workflows",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.VARCHAR(length=255), nullable=False),
        sa.Column("status", sa.VARCHAR(length=20), nullable=False),
        sa.Column("initial_chat_workflow_item_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_chat_workflows_status"), "chat_workflows", ["status"], unique=False)

    op.create_table(
        "chat_workflow_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("chat_workflow_id", sa.Uuid(), nullable=False),
        sa.Column("item_type", sa.VARCHAR(length=20), nullable=False),
        sa.Column("message", sa.TEXT(), nullable=True),
        sa.Column("render_type", sa.VARCHAR(length=255), nullable=True),
        sa.Column("response_wait", sa.INTEGER(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["chat_workflow_id"], ["chat_workflows.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_chat_workflow_items_chat_workflow_id"),
        "chat_workflow_items",
        ["chat_workflow_id"],
        unique=False,
    )

    op.create_foreign_key(
        "fk_chat_workflows_initial_item",
        "chat_workflows",
        "chat_workflow_items",
        ["initial_chat_workflow_item_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "chat_workflow_responses",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("chat_workflow_item_id", sa.Uuid(), nullable=False),
        sa.Column("response_type", sa.VARCHAR(length=20), nullable=False),
        sa.Column("response", sa.TEXT(), nullable=True),
        sa.Column("answer_value", sa.VARCHAR(length=255), nullable=True),
        sa.Column("next_chat_workflow_item_id", sa.Uuid(), nullable=True),
        sa.Column("rank", sa.INTEGER(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["chat_workflow_item_id"], ["chat_workflow_items.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["next_chat_workflow_item_id"], ["chat_workflow_items.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_chat_workflow_responses_chat_workflow_item_id"),
        "chat_workflow_responses",
        ["chat_workflow_item_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_chat_workflow_responses_next_chat_workflow_item_id"),
        "chat_workflow_responses",
        ["next_chat_workflow_item_id"],
        unique=False,
    )

    op.create_table(
        "chat_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.VARCHAR(length=255), nullable=False),
        sa.Column("chat_workflow_id", sa.Uuid(), nullable=False),
        sa.Column("chat_workflow_item_id", sa.Uuid(), nullable=True),
        sa.Column("context", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["chat_workflow_id"], ["chat_workflows.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["chat_workflow_item_id"], ["chat_workflow_items.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_chat_sessions_user_id"), "chat_sessions", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_chat_sessions_chat_workflow_id"), "chat_sessions", ["chat_workflow_id"], unique=False
    )
    op.create_index(
        op.f("ix_chat_sessions_expires_at"), "chat_sessions", ["expires_at"], unique=False
    )

    op.create_table(
        "chat_workflow_interactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("chat_workflow_item_id", sa.Uuid(), nullable=False),
        sa.Column("chat_workflow_response_id", sa.Uuid(), nullable=False),
        sa.Column("chat_session_id", sa.Uuid(), nullable=False),
        sa.Column("input", sa.TEXT(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_chat_workflow_interactions_chat_workflow_item_id"),
        "chat_workflow_interactions",
        ["chat_workflow_item_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_chat_workflow_interactions_chat_session_id"),
        "chat_workflow_interactions",
        ["chat_session_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_chat_workflow_interactions_created_at"),
        "chat_workflow_interactions",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "domain_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_type", sa.VARCHAR(length=100), nullable=False),
        sa.Column("display_text", sa.TEXT(), nullable=False),
        sa.Column("main_table", sa.VARCHAR(length=100), nullable=False),
        sa.Column("main_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.VARCHAR(length=255), nullable=True),
        sa.Column("event_data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_domain_events_event_type"), "domain_events", ["event_type"], unique=False
    )
    op.create_index(op.f("ix_domain_events_main_id"), "domain_events", ["main_id"], unique=False)


def downgrade() -> None:
    """Drop chat workflow tables."""
    op.drop_index(op.f("ix_domain_events_main_id"), table_name="domain_events")
    op.drop_index(op.f("ix_domain_events_event_type"), table_name="domain_events")
    op.drop_table("domain_events")

    op.drop_index(
        op.f("ix_chat_workflow_interactions_created_at"), table_name="chat_workflow_interactions"
    )
    op.drop_index(
        op.f("ix_chat_workflow_interactions_chat_session_id"),
        table_name="chat_workflow_interactions",
    )
    op.drop_index(
        op.f("ix_chat_workflow_interactions_chat_workflow_item_id"),
        table_name="chat_workflow_interactions",
    )
    op.drop_table("chat_workflow_interactions")

    op.drop_index(op.f("ix_chat_sessions_expires_at"), table_name="chat_sessions")
    op.drop_index(op.f("ix_chat_sessions_chat_workflow_id"), table_name="chat_sessions")
    op.drop_index(op.f("ix_chat_sessions_user_id"), table_name="chat_sessions")
    op.drop_table("chat_sessions")

    op.drop_index(
        op.f("ix_chat_workflow_responses_next_chat_workflow_item_id"),
        table_name="chat_workflow_responses",
    )
    op.drop_index(
        op.f("ix_chat_workflow_responses_chat_workflow_item_id"),
        table_name="chat_workflow_responses",
    )
    op.drop_table("chat_workflow_responses")

    op.drop_constraint("fk_chat_workflows_initial_item", "chat_workflows", type_="foreignkey")

    op.drop_index(op.f("ix_chat_workflow_items_chat_workflow_id"), table_name="chat_workflow_items")
    op.drop_table("chat_workflow_items")

    op.drop_index(op.f("ix_chat_workflows_status"), table_name="chat_workflows")
    op.drop_table("chat_workflows")
