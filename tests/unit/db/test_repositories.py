"""Tests for chat workflow repositories."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.db.models import ChatWorkflowItemType, ChatWorkflowStatus, utcnow
from chatflow.db.repository import (
    ChatSessionRepository,
    ChatWorkflowInteractionRepository,
    ChatWorkflowItemRepository,
    ChatWorkflowRepository,
    ChatWorkflowResponseRepository,
)


async def _workflow(db: AsyncSession, name: str, status: ChatWorkflowStatus):
    workflow = await ChatWorkflowRepository(db).create(name=name, status=status.value)
    item = await ChatWorkflowItemRepository(db).create(
        chat_workflow_id=workflow.id, item_type=ChatWorkflowItemType.QUESTION.value
    )
    return workflow, item


class TestChatWorkflowRepository:
    """Tests for ChatWorkflowRepository."""

    async def test_name_in_use(self, db: AsyncSession) -> None:
        """Name checks can ignore the workflow being renamed."""
        repo = ChatWorkflowRepository(db)
        workflow, _ = await _workflow(db, "support", ChatWorkflowStatus.DRAFT)

        assert await repo.name_in_use("support") is True
        assert await repo.name_in_use("support", exclude_id=workflow.id) is False
        assert await repo.name_in_use("other") is False

    async def test_is_initial_item(self, db: AsyncSession) -> None:
        """Only items referenced as an entry point count."""
        repo = ChatWorkflowRepository(db)
        workflow, item = await _workflow(db, "support", ChatWorkflowStatus.DRAFT)

        assert await repo.is_initial_item(item.id) is False
        await repo.update_instance(workflow, initial_chat_workflow_item_id=item.id)
        assert await repo.is_initial_item(item.id) is True


class TestChatWorkflowResponseRepository:
    """Tests for ChatWorkflowResponseRepository."""

    async def test_shift_ranks_window(self, db: AsyncSession) -> None:
        """Only ranks inside the window move."""
        repo = ChatWorkflowResponseRepository(db)
        _, item = await _workflow(db, "support", ChatWorkflowStatus.DRAFT)
        for rank in (1, 2, 3, 4):
            await repo.create(
                chat_workflow_item_id=item.id,
                response_type="answer",
                answer_value=str(rank),
                rank=rank,
            )

        await repo.shift_ranks(item.id, 1, min_rank=2, max_rank=3)

        ranks = {r.answer_value: r.rank for r in await repo.get_by_item(item.id)}
        assert ranks == {"1": 1, "2": 3, "3": 4, "4": 4}

    async def test_answer_value_in_use(self, db: AsyncSession) -> None:
        """Answer values are checked per item."""
        repo = ChatWorkflowResponseRepository(db)
        _, item = await _workflow(db, "support", ChatWorkflowStatus.DRAFT)
        response = await repo.create(
            chat_workflow_item_id=item.id, response_type="answer", answer_value="yes", rank=1
        )

        assert await repo.answer_value_in_use(item.id, "yes") is True
        assert await repo.answer_value_in_use(item.id, "yes", exclude_id=response.id) is False


class TestChatSessionRepository:
    """Tests for ChatSessionRepository."""

    async def test_active_session_requires_published_unexpired_workflow(
        self, db: AsyncSession
    ) -> None:
        """Draft workflows and expired sessions are ignored."""
        repo = ChatSessionRepository(db)
        draft, _ = await _workflow(db, "draft", ChatWorkflowStatus.DRAFT)
        live, _ = await _workflow(db, "live", ChatWorkflowStatus.PUBLISHED)
        now = utcnow()

        await repo.create(
            user_id="u", chat_workflow_id=draft.id, expires_at=now + timedelta(minutes=5)
        )
        await repo.create(
            user_id="u", chat_workflow_id=live.id, expires_at=now - timedelta(minutes=5)
        )
        assert await repo.get_active_for_user("u", now) is None

        active = await repo.create(
            user_id="u", chat_workflow_id=live.id, expires_at=now + timedelta(minutes=5)
        )
        found = await repo.get_active_for_user("u", now)
        assert found is not None
        assert found.id == active.id
        assert await repo.get_active_for_user("u", now, chat_workflow_id=draft.id) is None


class TestChatWorkflowInteractionRepository:
    """Tests for ChatWorkflowInteractionRepository."""

    async def test_get_by_chat_session(self, db: AsyncSession) -> None:
        """Interactions are returned per session."""
        repo = ChatWorkflowInteractionRepository(db)
        session_id = uuid4()
        await repo.create(
            chat_workflow_item_id=uuid4(),
            chat_workflow_response_id=uuid4(),
            chat_session_id=session_id,
            input="hi",
        )
        await repo.create(
            chat_workflow_item_id=uuid4(),
            chat_workflow_response_id=uuid4(),
            chat_session_id=uuid4(),
        )

        interactions = await repo.get_by_chat_session(session_id)

        assert [i.input for i in interactions] == ["hi"]
