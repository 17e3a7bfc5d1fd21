"""Tests for GraphStore."""

from __future__ import annotations

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.db.models import (
    ChatWorkflowInteraction,
    ChatWorkflowItemType,
    ChatWorkflowResponseType,
    ChatWorkflowStatus,
)
from chatflow.events import EventBus, EventType
from chatflow.workflow import (
    BusinessProcessError,
    ChatSessionRuntime,
    GraphStore,
    NotFoundError,
    ValidationError,
)


async def _ranks(store: GraphStore, item_id) -> dict:
    return {r.answer_value: r.rank for r in await store.responses_for_item(item_id)}


async def _question_with_answers(store: GraphStore, *values: str):
    workflow = await store.create_workflow(f"wf-{uuid4()}")
    question = await store.create_item(workflow.id, ChatWorkflowItemType.QUESTION)
    responses = []
    for value in values:
        responses.append(
            await store.create_response(
                question.id, ChatWorkflowResponseType.ANSWER, answer_value=value
            )
        )
    return workflow, question, responses


class TestWorkflows:
    """Tests for workflow creation, update and publishing."""

    async def test_create_workflow_starts_as_draft(self, store: GraphStore) -> None:
        """New workflows are drafts without an initial item."""
        workflow = await store.create_workflow("onboarding")

        assert workflow.status == ChatWorkflowStatus.DRAFT.value
        assert workflow.initial_chat_workflow_item_id is None
        events = await store.events.get_by_main_id(workflow.id)
        assert [e.event_type for e in events] == [EventType.CHAT_WORKFLOW_CREATED.value]

    async def test_create_workflow_rejects_blank_name(self, store: GraphStore) -> None:
        """Blank names are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await store.create_workflow("  ")

        assert exc_info.value.errors == {"name": ["can't be blank"]}

    async def test_create_workflow_rejects_duplicate_name(self, store: GraphStore) -> None:
        """Workflow names are unique."""
        await store.create_workflow("onboarding")

        with pytest.raises(ValidationError) as exc_info:
            await store.create_workflow("onboarding")

        assert exc_info.value.errors == {"name": ["Name is already in use"]}

    async def test_rename_to_own_name_is_allowed(self, store: GraphStore) -> None:
        """A workflow keeps its name when updated with it."""
        workflow = await store.create_workflow("onboarding")

        workflow = await store.update_workflow(workflow, {"name": "onboarding"})

        assert workflow.name == "onboarding"

    async def test_update_rejects_non_editable_fields(self, store: GraphStore) -> None:
        """Status can only change through publish."""
        workflow = await store.create_workflow("onboarding")

        with pytest.raises(ValidationError) as exc_info:
            await store.update_workflow(workflow, {"status": "published"})

        assert exc_info.value.errors == {"status": ["is not editable"]}

    async def test_initial_item_must_belong_to_workflow(self, store: GraphStore) -> None:
        """Items of other workflows cannot be entry points."""
        workflow = await store.create_workflow("one")
        other = await store.create_workflow("two")
        foreign = await store.create_item(other.id, ChatWorkflowItemType.DONE)

        with pytest.raises(ValidationError):
            await store.update_workflow(
                workflow, {"initial_chat_workflow_item_id": foreign.id}
            )

    async def test_publish_requires_initial_item(self, store: GraphStore) -> None:
        """Publishing without an entry point fails."""
        workflow = await store.create_workflow("onboarding")

        with pytest.raises(BusinessProcessError) as exc_info:
            await store.publish(workflow)

        assert exc_info.value.message == (
            "Initial chat workflow item must be set on workflow to publish"
        )
        assert workflow.status == ChatWorkflowStatus.DRAFT.value

    async def test_publish_is_idempotent(self, store: GraphStore) -> None:
        """Publishing twice records a single published event."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.DONE)
        workflow = await store.update_workflow(
            workflow, {"initial_chat_workflow_item_id": item.id}
        )

        workflow = await store.publish(workflow)
        workflow = await store.publish(workflow)

        assert workflow.status == ChatWorkflowStatus.PUBLISHED.value
        published = await store.events.get_by_main_id(
            workflow.id, event_type=EventType.CHAT_WORKFLOW_PUBLISHED.value
        )
        assert len(published) == 1
        assert published[0].event_data["tree"]["id"] == str(item.id)

    async def test_initial_item_cannot_be_cleared_once_published(
        self, store: GraphStore
    ) -> None:
        """Published workflows always keep an entry point."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.DONE)
        workflow = await store.update_workflow(
            workflow, {"initial_chat_workflow_item_id": item.id}
        )
        workflow = await store.publish(workflow)

        with pytest.raises(BusinessProcessError):
            await store.update_workflow(workflow, {"initial_chat_workflow_item_id": None})

    async def test_lifecycle_events_are_emitted(self, db: AsyncSession) -> None:
        """Created, published and deleted events reach the bus."""
        bus = EventBus()
        handler = AsyncMock()
        bus.subscribe_all(handler)
        store = GraphStore(db, event_bus=bus)

        workflow = await store.create_workflow("onboarding", user_id="admin")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.DONE)
        workflow = await store.update_workflow(
            workflow, {"initial_chat_workflow_item_id": item.id}
        )
        workflow = await store.publish(workflow, user_id="admin")
        await store.destroy_workflow(workflow, user_id="admin")

        types = [call.args[0].type for call in handler.call_args_list]
        assert types == [
            EventType.CHAT_WORKFLOW_CREATED,
            EventType.CHAT_WORKFLOW_PUBLISHED,
            EventType.CHAT_WORKFLOW_DELETED,
        ]
        assert all(call.args[0].user_id == "admin" for call in handler.call_args_list)

    async def test_find_missing_workflow(self, store: GraphStore) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await store.find_workflow(uuid4())

    async def test_list_workflows_ordered_by_name(self, store: GraphStore) -> None:
        """Workflows are listed alphabetically."""
        await store.create_workflow("b")
        await store.create_workflow("a")

        assert [w.name for w in await store.list_workflows()] == ["a", "b"]


class TestDestroyWorkflow:
    """Tests for workflow deletion."""

    async def test_destroy_cascades_and_keeps_snapshot(
        self, store: GraphStore, db: AsyncSession
    ) -> None:
        """Items, responses and sessions go; the audit event keeps the tree."""
        workflow = await store.create_workflow("onboarding")
        message = await store.create_item(
            workflow.id, ChatWorkflowItemType.MESSAGE, message="hello"
        )
        workflow = await store.update_workflow(
            workflow, {"initial_chat_workflow_item_id": message.id}
        )
        workflow = await store.publish(workflow)
        runtime = ChatSessionRuntime(db)
        session = await runtime.create("user-1", workflow.id)
        db.add(
            ChatWorkflowInteraction(
                chat_workflow_item_id=message.id,
                chat_workflow_response_id=uuid4(),
                chat_session_id=session.id,
            )
        )
        await db.commit()
        workflow_id = workflow.id

        await store.destroy_workflow(workflow)

        assert await store.workflows.get_by_id(workflow_id) is None
        assert await store.items.get_by_workflow(workflow_id) == []
        assert await store.responses.get_by_item(message.id) == []
        assert await store.sessions.get_by_id(session.id) is None
        assert len(await runtime.interactions.get_by_chat_session(session.id)) == 1

        deleted = await store.events.get_by_main_id(
            workflow_id, event_type=EventType.CHAT_WORKFLOW_DELETED.value
        )
        assert len(deleted) == 1
        snapshot = deleted[0].event_data
        assert snapshot["initial_chat_workflow_item_id"] == str(message.id)
        assert snapshot["tree"]["message"] == "hello"


class TestItems:
    """Tests for item creation and deletion."""

    @pytest.mark.parametrize("item_type", [ChatWorkflowItemType.MESSAGE, ChatWorkflowItemType.RENDER])
    async def test_noop_items_get_a_noop_response(
        self, store: GraphStore, item_type: ChatWorkflowItemType
    ) -> None:
        """Message and render items start with one noop response."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, item_type)

        responses = await store.responses_for_item(item.id)

        assert [(r.response_type, r.rank) for r in responses] == [
            (ChatWorkflowResponseType.NOOP.value, 1)
        ]

    async def test_question_items_start_without_responses(self, store: GraphStore) -> None:
        """Questions get their answers explicitly."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.QUESTION)

        assert await store.responses_for_item(item.id) == []
        assert item.response_wait == 10

    async def test_create_item_rejects_negative_wait(self, store: GraphStore) -> None:
        """response_wait cannot be negative."""
        workflow = await store.create_workflow("onboarding")

        with pytest.raises(ValidationError) as exc_info:
            await store.create_item(workflow.id, ChatWorkflowItemType.DONE, response_wait=-1)

        assert "response_wait" in exc_info.value.errors

    async def test_create_item_on_missing_workflow(self, store: GraphStore) -> None:
        """Items need an existing workflow."""
        with pytest.raises(NotFoundError):
            await store.create_item(uuid4(), ChatWorkflowItemType.DONE)

    async def test_update_item_rejects_item_type(self, store: GraphStore) -> None:
        """The kind of an item is fixed."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.DONE)

        with pytest.raises(ValidationError) as exc_info:
            await store.update_item(item, {"item_type": "question"})

        assert exc_info.value.errors == {"item_type": ["is not editable"]}

    async def test_initial_item_cannot_be_destroyed(self, store: GraphStore) -> None:
        """The entry point of a workflow is protected until it is unset."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.MESSAGE)
        question = await store.create_item(workflow.id, ChatWorkflowItemType.QUESTION)
        back = await store.create_response(
            question.id,
            ChatWorkflowResponseType.ANSWER,
            answer_value="again",
            next_chat_workflow_item_id=item.id,
        )
        (noop,) = await store.responses_for_item(item.id)
        workflow = await store.update_workflow(
            workflow, {"initial_chat_workflow_item_id": item.id}
        )

        with pytest.raises(BusinessProcessError) as exc_info:
            await store.destroy_item(item)

        assert exc_info.value.message == (
            "Chat workflow item cannot be destroyed, used as an initial chat workflow item"
        )
        assert await store.items.get_by_id(item.id) is not None

        await store.update_workflow(workflow, {"initial_chat_workflow_item_id": None})
        await store.destroy_item(item)

        assert await store.items.get_by_id(item.id) is None
        assert await store.responses.get_by_id(noop.id) is None
        assert await store.responses_for_item(item.id) == []
        back = await store.find_response(back.id)
        assert back.next_chat_workflow_item_id is None

    async def test_destroy_item_detaches_incoming_edges_and_sessions(
        self, store: GraphStore, db: AsyncSession
    ) -> None:
        """Edges into a destroyed item become terminal and sessions on it stop."""
        workflow = await store.create_workflow("onboarding")
        start = await store.create_item(workflow.id, ChatWorkflowItemType.MESSAGE)
        target = await store.create_item(workflow.id, ChatWorkflowItemType.MESSAGE)
        edge = (await store.responses_for_item(start.id))[0]
        await store.update_response(edge, {"next_chat_workflow_item_id": target.id})
        workflow = await store.update_workflow(
            workflow, {"initial_chat_workflow_item_id": start.id}
        )
        workflow = await store.publish(workflow)
        runtime = ChatSessionRuntime(db)
        session = await runtime.create("user-1", workflow.id)
        session = await runtime.update(session, chat_workflow_item_id=target.id)

        await store.destroy_item(target)

        assert await store.items.get_by_id(target.id) is None
        assert await store.responses_for_item(target.id) == []
        edge = await store.find_response(edge.id)
        assert edge.next_chat_workflow_item_id is None
        await db.refresh(session)
        assert session.chat_workflow_item_id is None


class TestResponseValidation:
    """Tests for response validation rules."""

    async def test_response_type_must_fit_item(self, store: GraphStore) -> None:
        """Message items cannot carry answers."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.MESSAGE)

        with pytest.raises(ValidationError) as exc_info:
            await store.create_response(
                item.id, ChatWorkflowResponseType.ANSWER, answer_value="x"
            )

        assert exc_info.value.errors["response_type"] == ["is not available for message items"]

    async def test_done_items_take_no_responses(self, store: GraphStore) -> None:
        """Done items have no outgoing edges."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.DONE)

        with pytest.raises(ValidationError):
            await store.create_response(item.id, ChatWorkflowResponseType.NOOP)

    async def test_noop_is_not_repeatable(self, store: GraphStore) -> None:
        """An item holds at most one noop response."""
        workflow = await store.create_workflow("onboarding")
        item = await store.create_item(workflow.id, ChatWorkflowItemType.MESSAGE)

        with pytest.raises(ValidationError) as exc_info:
            await store.create_response(item.id, ChatWorkflowResponseType.NOOP)

        assert exc_info.value.errors["response_type"] == ["has already been added to this item"]

    async def test_answer_requires_value(self, store: GraphStore) -> None:
        """Answers need an answer value."""
        _, question, _ = await _question_with_answers(store)

        with pytest.raises(ValidationError) as exc_info:
            await store.create_response(question.id, ChatWorkflowResponseType.ANSWER)

        assert exc_info.value.errors == {"answer_value": ["can't be blank"]}

    async def test_answer_value_unique_per_item(self, store: GraphStore) -> None:
        """Answer values are unique among siblings only."""
        workflow, question, _ = await _question_with_answers(store, "yes")
        other = await store.create_item(workflow.id, ChatWorkflowItemType.QUESTION)

        with pytest.raises(ValidationError) as exc_info:
            await store.create_response(
                question.id, ChatWorkflowResponseType.ANSWER, answer_value="yes"
            )
        created = await store.create_response(
            other.id, ChatWorkflowResponseType.ANSWER, answer_value="yes"
        )

        assert exc_info.value.errors == {"answer_value": ["Answer value is already in use"]}
        assert created.answer_value == "yes"

    async def test_answer_can_keep_its_own_value(self, store: GraphStore) -> None:
        """Updating a response does not collide with itself."""
        _, _, (yes,) = await _question_with_answers(store, "yes")

        updated = await store.update_response(yes, {"answer_value": "yes", "response": "ok"})

        assert updated.response == "ok"

    async def test_next_item_must_share_workflow(self, store: GraphStore) -> None:
        """Edges never cross workflows."""
        _, question, _ = await _question_with_answers(store)
        other = await store.create_workflow("other")
        foreign = await store.create_item(other.id, ChatWorkflowItemType.DONE)

        with pytest.raises(ValidationError) as exc_info:
            await store.create_response(
                question.id,
                ChatWorkflowResponseType.ANSWER,
                answer_value="yes",
                next_chat_workflow_item_id=foreign.id,
            )

        assert exc_info.value.errors == {
            "next_chat_workflow_item_id": ["must belong to the same chat workflow"]
        }


class TestResponseRanks:
    """Tests for dense rank maintenance among sibling responses."""

    async def test_append_when_rank_omitted(self, store: GraphStore) -> None:
        """Responses without a rank go last."""
        _, question, _ = await _question_with_answers(store, "a", "b", "c")

        assert await _ranks(store, question.id) == {"a": 1, "b": 2, "c": 3}

    async def test_insert_shifts_later_siblings(self, store: GraphStore) -> None:
        """Inserting at rank 2 moves ranks 2 and 3 down."""
        _, question, _ = await _question_with_answers(store, "a", "b", "c")

        await store.create_response(
            question.id, ChatWorkflowResponseType.ANSWER, answer_value="new", rank=2
        )

        assert await _ranks(store, question.id) == {"a": 1, "new": 2, "b": 3, "c": 4}

    async def test_insert_rank_is_clamped(self, store: GraphStore) -> None:
        """Ranks past the end append."""
        _, question, _ = await _question_with_answers(store, "a", "b")

        created = await store.create_response(
            question.id, ChatWorkflowResponseType.ANSWER, answer_value="c", rank=10
        )

        assert created.rank == 3

    async def test_move_up(self, store: GraphStore) -> None:
        """Moving a response up pushes the ones it passes down."""
        _, question, (_, _, _, d) = await _question_with_answers(store, "a", "b", "c", "d")

        await store.update_response(d, {"rank": 1})

        assert await _ranks(store, question.id) == {"d": 1, "a": 2, "b": 3, "c": 4}

    async def test_move_down(self, store: GraphStore) -> None:
        """Moving a response down pulls the ones it passes up."""
        _, question, (a, _, _, _) = await _question_with_answers(store, "a", "b", "c", "d")

        await store.update_response(a, {"rank": 3})

        assert await _ranks(store, question.id) == {"b": 1, "c": 2, "a": 3, "d": 4}

    async def test_null_rank_leaves_order(self, store: GraphStore) -> None:
        """A null rank in an update is ignored."""
        _, question, (a, _) = await _question_with_answers(store, "a", "b")

        await store.update_response(a, {"rank": None, "response": "first"})

        assert await _ranks(store, question.id) == {"a": 1, "b": 2}

    async def test_destroy_closes_gap(self, store: GraphStore) -> None:
        """Deleting a response keeps ranks dense."""
        _, question, (_, b, _) = await _question_with_answers(store, "a", "b", "c")

        await store.destroy_response(b)

        assert await _ranks(store, question.id) == {"a": 1, "c": 2}
