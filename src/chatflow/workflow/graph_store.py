"""Durable storage and structural rules of chat workflow graphs."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.config import get_chat_settings
from chatflow.db.models import (
    ChatWorkflow,
    ChatWorkflowItem,
    ChatWorkflowItemType,
    ChatWorkflowResponse,
    ChatWorkflowResponseType,
    ChatWorkflowStatus,
    DomainEvent,
)
from chatflow.db.models.enums import REPEATABLE_RESPONSE_TYPES
from chatflow.db.repository import (
    ChatSessionRepository,
    ChatWorkflowItemRepository,
    ChatWorkflowRepository,
    ChatWorkflowResponseRepository,
    DomainEventRepository,
)
from chatflow.events import EventBus, EventType, WorkflowEvent

from .errors import BusinessProcessError, NotFoundError, ValidationError, translate_storage_errors
from .tree import WorkflowGraph, render_item, render_workflow

logger = structlog.get_logger()

WORKFLOW_EDITABLE = frozenset({"name", "initial_chat_workflow_item_id"})
ITEM_EDITABLE = frozenset({"message", "render_type", "response_wait"})
RESPONSE_EDITABLE = frozenset(
    {"response_type", "response", "answer_value", "next_chat_workflow_item_id", "rank"}
)


def _check_editable(attrs: dict[str, Any], editable: frozenset[str]) -> None:
    errors = {key: ["is not editable"] for key in attrs if key not in editable}
    if errors:
        raise ValidationError(errors)


class GraphStore:
    """Creates, edits and destroys workflows, items and responses.

    Every public mutation runs in the caller's session and commits on
    success. Uniqueness and structural rules are checked before anything
    is written.
    """

    def __init__(self, db: AsyncSession, event_bus: EventBus | None = None) -> None:
        """Initialize graph store.

        Args:
            db: Database session
            event_bus: Optional bus receiving workflow lifecycle events
        """
        self.db = db
        self.event_bus = event_bus
        self.workflows = ChatWorkflowRepository(db)
        self.items = ChatWorkflowItemRepository(db)
        self.responses = ChatWorkflowResponseRepository(db)
        self.sessions = ChatSessionRepository(db)
        self.events = DomainEventRepository(db)

    # ==================== Lookups ====================

    async def find_workflow(self, workflow_id: UUID) -> ChatWorkflow:
        workflow = await self.workflows.get_by_id(workflow_id)
        if workflow is None:
            raise NotFoundError("ChatWorkflow", workflow_id)
        return workflow

    async def find_workflow_by_name(self, name: str) -> ChatWorkflow | None:
        return await self.workflows.get_by_name(name)

    async def list_workflows(self, limit: int = 100, offset: int = 0) -> list[ChatWorkflow]:
        return await self.workflows.list_by_name(limit=limit, offset=offset)

    async def find_item(self, item_id: UUID) -> ChatWorkflowItem:
        item = await self.items.get_by_id(item_id)
        if item is None:
            raise NotFoundError("ChatWorkflowItem", item_id)
        return item

    async def find_response(self, response_id: UUID) -> ChatWorkflowResponse:
        response = await self.responses.get_by_id(response_id)
        if response is None:
            raise NotFoundError("ChatWorkflowResponse", response_id)
        return response

    async def responses_for_item(self, item_id: UUID) -> list[ChatWorkflowResponse]:
        return await self.responses.get_by_item(item_id)

    async def load_graph(self, workflow_id: UUID) -> WorkflowGraph:
        """Load every item and response of a workflow into an arena.

        Args:
            workflow_id: Workflow UUID

        Returns:
            WorkflowGraph for the workflow
        """
        items = await self.items.get_by_workflow(workflow_id)
        responses = await self.responses.get_by_items(item.id for item in items)
        return WorkflowGraph.build(items, responses)

    async def display_workflow(self, workflow: ChatWorkflow) -> dict[str, Any]:
        graph = await self.load_graph(workflow.id)
        return render_workflow(workflow, graph)

    async def display_item(self, item: ChatWorkflowItem) -> dict[str, Any]:
        graph = await self.load_graph(item.chat_workflow_id)
        return render_item(item.id, graph)

    async def workflow_history(self, workflow: ChatWorkflow) -> list[DomainEvent]:
        """Audit events recorded for a workflow, oldest first."""
        return await self.events.get_by_main_id(workflow.id)

    # ==================== Workflows ====================

    @translate_storage_errors
    async def create_workflow(self, name: str, user_id: str | None = None) -> ChatWorkflow:
        """Create a draft workflow.

        Args:
            name: Unique workflow name
            user_id: Acting user, recorded on the audit event

        Returns:
            Created workflow

        Raises:
            ValidationError: If the name is blank or already in use
        """
        await self._validate_workflow_name(name)

        workflow = await self.workflows.create(
            name=name, status=ChatWorkflowStatus.DRAFT.value
        )
        event = await self._record_event(
            EventType.CHAT_WORKFLOW_CREATED,
            workflow,
            display_text=f"Chat workflow {workflow.name} created",
            payload=await self.display_workflow(workflow),
            user_id=user_id,
        )
        await self.db.commit()

        logger.info("chat_workflow_created", chat_workflow_id=str(workflow.id), name=name)
        await self._emit(event)
        return workflow

    @translate_storage_errors
    async def update_workflow(
        self, workflow: ChatWorkflow, attrs: dict[str, Any]
    ) -> ChatWorkflow:
        """Update the name or the initial item of a workflow.

        Args:
            workflow: Workflow to update
            attrs: New attribute values

        Returns:
            Updated workflow

        Raises:
            ValidationError: If a field is invalid
            BusinessProcessError: If the initial item is cleared on a
                published workflow
        """
        _check_editable(attrs, WORKFLOW_EDITABLE)

        if "name" in attrs:
            await self._validate_workflow_name(attrs["name"], exclude_id=workflow.id)

        if "initial_chat_workflow_item_id" in attrs:
            initial_id = attrs["initial_chat_workflow_item_id"]
            if initial_id is None:
                if workflow.is_published:
                    raise BusinessProcessError(
                        "Initial chat workflow item cannot be removed on published chat workflow"
                    )
            else:
                item = await self.items.get_by_id(initial_id)
                if item is None or item.chat_workflow_id != workflow.id:
                    raise ValidationError.single(
                        "initial_chat_workflow_item_id", "must belong to this chat workflow"
                    )

        workflow = await self.workflows.update_instance(workflow, **attrs)
        await self.db.commit()

        logger.info(
            "chat_workflow_updated",
            chat_workflow_id=str(workflow.id),
            fields=sorted(attrs),
        )
        return workflow

    @translate_storage_errors
    async def publish(self, workflow: ChatWorkflow, user_id: str | None = None) -> ChatWorkflow:
        """Publish a workflow so sessions can be started on it.

        Publishing an already published workflow returns it unchanged.

        Args:
            workflow: Workflow to publish
            user_id: Acting user, recorded on the audit event

        Returns:
            Published workflow

        Raises:
            BusinessProcessError: If no initial item is set
        """
        if workflow.is_published:
            logger.debug("chat_workflow_already_published", chat_workflow_id=str(workflow.id))
            return workflow

        if workflow.initial_chat_workflow_item_id is None:
            raise BusinessProcessError(
                "Initial chat workflow item must be set on workflow to publish"
            )

        workflow = await self.workflows.update_instance(
            workflow, status=ChatWorkflowStatus.PUBLISHED.value
        )
        event = await self._record_event(
            EventType.CHAT_WORKFLOW_PUBLISHED,
            workflow,
            display_text=f"Chat workflow {workflow.name} published",
            payload=await self.display_workflow(workflow),
            user_id=user_id,
        )
        await self.db.commit()

        logger.info("chat_workflow_published", chat_workflow_id=str(workflow.id))
        await self._emit(event)
        return workflow

    @translate_storage_errors
    async def destroy_workflow(self, workflow: ChatWorkflow, user_id: str | None = None) -> None:
        """Delete a workflow with its items, responses and sessions.

        The rendered workflow is captured before anything is removed and
        stored on the deletion audit event. Interactions are kept.

        Args:
            workflow: Workflow to delete
            user_id: Acting user, recorded on the audit event
        """
        snapshot = await self.display_workflow(workflow)
        workflow_id = workflow.id

        await self.workflows.update_instance(workflow, initial_chat_workflow_item_id=None)

        item_ids = [item.id for item in await self.items.get_by_workflow(workflow_id)]
        await self.sessions.delete_by_workflow(workflow_id)
        await self.responses.delete_by_items(item_ids)
        await self.items.delete_by_workflow(workflow_id)
        await self.workflows.delete_instance(workflow)

        event = await self._record_event(
            EventType.CHAT_WORKFLOW_DELETED,
            workflow,
            display_text=f"Chat workflow {workflow.name} deleted",
            payload=snapshot,
            user_id=user_id,
        )
        await self.db.commit()

        logger.info(
            "chat_workflow_deleted",
            chat_workflow_id=str(workflow_id),
            item_count=len(item_ids),
        )
        await self._emit(event)

    # ==================== Items ====================

    @translate_storage_errors
    async def create_item(
        self,
        chat_workflow_id: UUID,
        item_type: ChatWorkflowItemType | str,
        message: str | None = None,
        render_type: str | None = None,
        response_wait: int | None = None,
    ) -> ChatWorkflowItem:
        """Add an item to a workflow.

        Message and render items get their single noop response at rank 1.

        Args:
            chat_workflow_id: Owning workflow
            item_type: Kind of item
            message: Optional message template
            render_type: Optional render tag
            response_wait: Seconds before the client auto-advances

        Returns:
            Created item

        Raises:
            NotFoundError: If the workflow does not exist
            ValidationError: If a field is invalid
        """
        await self.find_workflow(chat_workflow_id)
        try:
            kind = ChatWorkflowItemType(item_type)
        except ValueError:
            raise ValidationError.single("item_type", "is not a valid item type") from None

        values: dict[str, Any] = {
            "chat_workflow_id": chat_workflow_id,
            "item_type": kind.value,
            "message": message,
            "render_type": render_type,
        }
        if response_wait is None:
            response_wait = get_chat_settings().default_response_wait
        _validate_response_wait(response_wait)
        values["response_wait"] = response_wait

        item = await self.items.create(**values)
        if item.available_response_types() == [ChatWorkflowResponseType.NOOP]:
            await self.responses.create(
                chat_workflow_item_id=item.id,
                response_type=ChatWorkflowResponseType.NOOP.value,
                rank=1,
            )
        await self.db.commit()

        logger.info(
            "chat_workflow_item_created",
            chat_workflow_id=str(chat_workflow_id),
            chat_workflow_item_id=str(item.id),
            item_type=kind.value,
        )
        return item

    @translate_storage_errors
    async def update_item(self, item: ChatWorkflowItem, attrs: dict[str, Any]) -> ChatWorkflowItem:
        """Update the editable attributes of an item.

        Args:
            item: Item to update
            attrs: New attribute values

        Returns:
            Updated item

        Raises:
            ValidationError: If a field is not editable or invalid
        """
        _check_editable(attrs, ITEM_EDITABLE)
        if "response_wait" in attrs:
            _validate_response_wait(attrs["response_wait"])

        item = await self.items.update_instance(item, **attrs)
        await self.db.commit()

        logger.info("chat_workflow_item_updated", chat_workflow_item_id=str(item.id))
        return item

    @translate_storage_errors
    async def destroy_item(self, item: ChatWorkflowItem) -> None:
        """Delete an item, its outgoing responses and every edge into it.

        Args:
            item: Item to delete

        Raises:
            BusinessProcessError: If the item is a workflow's initial item
        """
        if await self.workflows.is_initial_item(item.id):
            raise BusinessProcessError(
                "Chat workflow item cannot be destroyed, used as an initial chat workflow item"
            )

        item_id = item.id
        await self.responses.clear_next_item(item_id)
        await self.sessions.clear_item(item_id)
        await self.responses.delete_by_items([item_id])
        await self.items.delete_instance(item)
        await self.db.commit()

        logger.info("chat_workflow_item_deleted", chat_workflow_item_id=str(item_id))

    # ==================== Responses ====================

    @translate_storage_errors
    async def create_response(
        self,
        chat_workflow_item_id: UUID,
        response_type: ChatWorkflowResponseType | str,
        response: str | None = None,
        answer_value: str | None = None,
        next_chat_workflow_item_id: UUID | None = None,
        rank: int | None = None,
    ) -> ChatWorkflowResponse:
        """Add a response to an item at a rank, shifting later siblings down.

        Args:
            chat_workflow_item_id: Source item
            response_type: Kind of response
            response: Optional reply template
            answer_value: Value matched against user input
            next_chat_workflow_item_id: Target item, None ends the conversation
            rank: Position among siblings, appended when None

        Returns:
            Created response

        Raises:
            NotFoundError: If the source item does not exist
            ValidationError: If a field is invalid
        """
        item = await self.find_item(chat_workflow_item_id)
        siblings = await self.responses.get_by_item(item.id)
        kind = await self._validate_response(
            item,
            siblings,
            response_type=response_type,
            answer_value=answer_value,
            next_item_id=next_chat_workflow_item_id,
        )

        count = len(siblings)
        target = _clamp_rank(rank if rank is not None else count + 1, count + 1)
        if target <= count:
            await self.responses.shift_ranks(item.id, 1, min_rank=target)

        created = await self.responses.create(
            chat_workflow_item_id=item.id,
            response_type=kind.value,
            response=response,
            answer_value=answer_value,
            next_chat_workflow_item_id=next_chat_workflow_item_id,
            rank=target,
        )
        await self.db.commit()

        logger.info(
            "chat_workflow_response_created",
            chat_workflow_item_id=str(item.id),
            chat_workflow_response_id=str(created.id),
            rank=target,
        )
        return created

    @translate_storage_errors
    async def update_response(
        self, response: ChatWorkflowResponse, attrs: dict[str, Any]
    ) -> ChatWorkflowResponse:
        """Update a response, moving it among its siblings when rank changes.

        Args:
            response: Response to update
            attrs: New attribute values

        Returns:
            Updated response

        Raises:
            ValidationError: If a field is not editable or invalid
        """
        _check_editable(attrs, RESPONSE_EDITABLE)
        item = await self.find_item(response.chat_workflow_item_id)
        siblings = await self.responses.get_by_item(item.id)

        kind = await self._validate_response(
            item,
            siblings,
            response_type=attrs.get("response_type", response.response_type),
            answer_value=attrs.get("answer_value", response.answer_value),
            next_item_id=attrs.get(
                "next_chat_workflow_item_id", response.next_chat_workflow_item_id
            ),
            exclude_id=response.id,
        )
        values = dict(attrs)
        if "response_type" in values:
            values["response_type"] = kind.value

        if values.get("rank") is not None:
            current = response.rank
            target = _clamp_rank(values["rank"], len(siblings))
            if target < current:
                await self.responses.shift_ranks(
                    item.id, 1, min_rank=target, max_rank=current - 1, exclude_id=response.id
                )
            elif target > current:
                await self.responses.shift_ranks(
                    item.id, -1, min_rank=current + 1, max_rank=target, exclude_id=response.id
                )
            values["rank"] = target
        else:
            values.pop("rank", None)

        response = await self.responses.update_instance(response, **values)
        await self.db.commit()

        logger.info(
            "chat_workflow_response_updated",
            chat_workflow_response_id=str(response.id),
            fields=sorted(attrs),
        )
        return response

    @translate_storage_errors
    async def destroy_response(self, response: ChatWorkflowResponse) -> None:
        """Delete a response and close the gap in its siblings' ranks.

        Args:
            response: Response to delete
        """
        item_id = response.chat_workflow_item_id
        response_id = response.id
        rank = response.rank

        await self.responses.delete_instance(response)
        await self.responses.shift_ranks(item_id, -1, min_rank=rank + 1)
        await self.db.commit()

        logger.info("chat_workflow_response_deleted", chat_workflow_response_id=str(response_id))

    # ==================== Internals ====================

    async def _validate_workflow_name(self, name: str | None, exclude_id: UUID | None = None) -> None:
        if not name or not name.strip():
            raise ValidationError.single("name", "can't be blank")
        if await self.workflows.name_in_use(name, exclude_id=exclude_id):
            raise ValidationError.single("name", "Name is already in use")

    async def _validate_response(
        self,
        item: ChatWorkflowItem,
        siblings: list[ChatWorkflowResponse],
        response_type: ChatWorkflowResponseType | str,
        answer_value: str | None,
        next_item_id: UUID | None,
        exclude_id: UUID | None = None,
    ) -> ChatWorkflowResponseType:
        errors: dict[str, list[str]] = {}
        others = [r for r in siblings if r.id != exclude_id]

        try:
            kind = ChatWorkflowResponseType(response_type)
        except ValueError:
            raise ValidationError.single(
                "response_type", "is not a valid response type"
            ) from None

        if kind not in item.available_response_types():
            errors.setdefault("response_type", []).append(
                f"is not available for {item.item_type} items"
            )
        elif kind not in REPEATABLE_RESPONSE_TYPES and any(r.type == kind for r in others):
            errors.setdefault("response_type", []).append("has already been added to this item")

        if kind == ChatWorkflowResponseType.ANSWER:
            if not answer_value:
                errors.setdefault("answer_value", []).append("can't be blank")
            elif await self.responses.answer_value_in_use(
                item.id, answer_value, exclude_id=exclude_id
            ):
                errors.setdefault("answer_value", []).append("Answer value is already in use")

        if next_item_id is not None:
            next_item = await self.items.get_by_id(next_item_id)
            if next_item is None or next_item.chat_workflow_id != item.chat_workflow_id:
                errors.setdefault("next_chat_workflow_item_id", []).append(
                    "must belong to the same chat workflow"
                )

        if errors:
            raise ValidationError(errors)
        return kind

    async def _record_event(
        self,
        event_type: EventType,
        workflow: ChatWorkflow,
        display_text: str,
        payload: dict[str, Any],
        user_id: str | None,
    ) -> WorkflowEvent:
        await self.events.create(
            event_type=str(event_type),
            display_text=display_text,
            main_table=ChatWorkflow.__tablename__,
            main_id=workflow.id,
            user_id=user_id,
            event_data=payload,
        )
        return WorkflowEvent(
            type=event_type,
            chat_workflow_id=workflow.id,
            user_id=user_id,
            display_text=display_text,
            payload=payload,
        )

    async def _emit(self, event: WorkflowEvent) -> None:
        if self.event_bus is not None:
            await self.event_bus.emit(event)


def _clamp_rank(rank: int, upper: int) -> int:
    return max(1, min(rank, max(upper, 1)))


def _validate_response_wait(value: Any) -> None:
    if not isinstance(value, int) or value < 0:
        raise ValidationError.single("response_wait", "must be a non-negative integer")
