"""Tests for ChatSessionRuntime."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.db.models import ChatSession, ChatWorkflowItemType, utcnow
from chatflow.workflow import (
    BusinessProcessError,
    ChatSessionRuntime,
    GraphStore,
    NotFoundError,
)


class TestCreate:
    """Tests for starting chat sessions."""

    async def test_positions_session_on_initial_item(
        self, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """New sessions start on the initial item with the given context."""
        session = await runtime.create("user-1", question_workflow.workflow.id, {"name": "Sam"})

        assert session.chat_workflow_item_id == question_workflow.question.id
        assert session.context == {"name": "Sam"}
        assert session.expires_at > utcnow()

    async def test_draft_workflow_is_rejected(
        self, store: GraphStore, runtime: ChatSessionRuntime
    ) -> None:
        """Drafts cannot be walked."""
        workflow = await store.create_workflow("draft")

        with pytest.raises(BusinessProcessError) as exc_info:
            await runtime.create("user-1", workflow.id)

        assert exc_info.value.message == (
            "Unable to start chat session, workflow is in draft status"
        )

    async def test_missing_workflow(self, runtime: ChatSessionRuntime) -> None:
        """Unknown workflows raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await runtime.create("user-1", uuid4())

    async def test_one_active_session_per_workflow(
        self, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """A user cannot start a second live session on the same workflow."""
        await runtime.create("user-1", question_workflow.workflow.id)

        with pytest.raises(BusinessProcessError) as exc_info:
            await runtime.create("user-1", question_workflow.workflow.id)
        other_user = await runtime.create("user-2", question_workflow.workflow.id)

        assert exc_info.value.message == "Could not create chat session as one is already ongoing"
        assert other_user.user_id == "user-2"

    async def test_expired_session_does_not_block_a_new_one(
        self, db: AsyncSession, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """Once expired, a session no longer counts as ongoing."""
        old = await runtime.create("user-1", question_workflow.workflow.id)
        old.expires_at = utcnow() - timedelta(minutes=1)
        await db.commit()

        new = await runtime.create("user-1", question_workflow.workflow.id)

        assert new.id != old.id


class TestLookups:
    """Tests for session lookups."""

    async def test_find_active_for_user_returns_newest(
        self, store: GraphStore, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """The most recently started live session wins."""
        second = await store.create_workflow("second")
        item = await store.create_item(second.id, ChatWorkflowItemType.DONE)
        second = await store.update_workflow(second, {"initial_chat_workflow_item_id": item.id})
        second = await store.publish(second)

        await runtime.create("user-1", question_workflow.workflow.id)
        newest = await runtime.create("user-1", second.id)

        active = await runtime.find_active_for_user("user-1")

        assert active is not None
        assert active.id == newest.id
        assert await runtime.find_active_for_user("nobody") is None

    async def test_find_missing_session(self, runtime: ChatSessionRuntime) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await runtime.find(uuid4())

    async def test_current_item(self, runtime: ChatSessionRuntime, question_workflow) -> None:
        """The current item follows the session position."""
        session = await runtime.create("user-1", question_workflow.workflow.id)

        item = await runtime.current_item(session)

        assert item is not None
        assert item.id == question_workflow.question.id


class TestUpdate:
    """Tests for session updates and expiry."""

    async def test_update_extends_expiry(
        self, db: AsyncSession, question_workflow
    ) -> None:
        """Every update pushes expires_at a full TTL ahead."""
        runtime = ChatSessionRuntime(db, session_ttl=timedelta(minutes=30))
        session = await runtime.create("user-1", question_workflow.workflow.id)
        session.expires_at = utcnow() + timedelta(seconds=5)
        await db.commit()

        session = await runtime.update(session, context={"step": 2})

        assert session.context == {"step": 2}
        assert session.expires_at > utcnow() + timedelta(minutes=29)

    async def test_expired_session_cannot_be_updated(
        self, db: AsyncSession, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """Updates past expires_at fail and change nothing."""
        session = await runtime.create("user-1", question_workflow.workflow.id)
        session.expires_at = utcnow() - timedelta(seconds=1)
        await db.commit()

        with pytest.raises(BusinessProcessError) as exc_info:
            await runtime.update(session, context={"step": 2})

        assert exc_info.value.message == "Unable to update chat session as it has expired"
        assert session.context == {}

    async def test_update_rejects_unknown_attributes(
        self, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """Only the position and context are editable."""
        session = await runtime.create("user-1", question_workflow.workflow.id)

        with pytest.raises(ValueError):
            await runtime.update(session, user_id="someone-else")

    async def test_add_value_to_context(
        self, runtime: ChatSessionRuntime, question_workflow
    ) -> None:
        """Values are merged into the existing context."""
        session = await runtime.create("user-1", question_workflow.workflow.id, {"a": 1})

        session = await runtime.add_value_to_context(session, "b", 2)

        assert session.context == {"a": 1, "b": 2}

    def test_session_without_expiry_never_expires(self) -> None:
        """A missing expires_at means no expiry."""
        assert ChatSessionRuntime.is_expired(ChatSession(expires_at=None)) is False
        assert ChatSessionRuntime.is_expired(
            ChatSession(expires_at=utcnow() - timedelta(seconds=1))
        )
