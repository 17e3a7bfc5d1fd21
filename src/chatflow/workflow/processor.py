"""The chat session state machine.

``resolve_transition`` is a pure function deciding which response a user
message takes from the current item and how the session context changes.
``ResponseProcessor`` applies its result to the database.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from chatflow.db.models import (
    ChatSession,
    ChatWorkflowInteraction,
    ChatWorkflowItem,
    ChatWorkflowItemType,
    ChatWorkflowResponse,
    ChatWorkflowResponseType,
)
from chatflow.db.repository import (
    ChatWorkflowInteractionRepository,
    ChatWorkflowResponseRepository,
)

from .errors import BusinessProcessError, translate_storage_errors
from .session_runtime import ChatSessionRuntime

logger = structlog.get_logger()

NO_VALID_INPUT = "Unable to process response, no valid input provided"
RESPONSE_NOT_VALID = (
    "Unable to process response, chat workflow response not valid for chat workflow item"
)


@dataclass(frozen=True)
class Transition:
    """Outcome of a successful transition.

    Attributes:
        response: Response taken
        next_item_id: New session position, None when the walk is over
        input: Input recorded on the interaction
        context: Session context after the transition
    """

    response: ChatWorkflowResponse
    next_item_id: UUID | None
    input: str | None
    context: dict[str, Any]


class TransitionError(Exception):
    """A user message could not be turned into a transition.

    Attributes:
        message: User-facing reason
        context: Session context to persist anyway (carries last_input)
    """

    def __init__(self, message: str, context: dict[str, Any]) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


def _noop_response(responses: Sequence[ChatWorkflowResponse]) -> ChatWorkflowResponse | None:
    return next((r for r in responses if r.type == ChatWorkflowResponseType.NOOP), None)


def resolve_transition(
    context: Mapping[str, Any] | None,
    item: ChatWorkflowItem,
    responses: Sequence[ChatWorkflowResponse],
    chosen: ChatWorkflowResponse | None = None,
    raw_input: str | None = None,
) -> Transition:
    """Decide the transition taken from an item.

    Args:
        context: Current session context
        item: Item the session is positioned on
        responses: Outgoing responses of the item
        chosen: Response explicitly picked by the user, if any
        raw_input: Free text sent by the user, if any

    Returns:
        Transition to apply

    Raises:
        TransitionError: If no valid response can be resolved
    """
    ctx = dict(context or {})
    response = chosen
    value = raw_input

    if response is None and value is None:
        response = _noop_response(responses)

    if value is None and item.type == ChatWorkflowItemType.QUESTION and response is not None:
        value = response.answer_value

    ctx["last_input"] = value

    if value is not None and response is None:
        response = next((r for r in responses if r.answer_value == value), None)

    if response is None:
        raise TransitionError(NO_VALID_INPUT, ctx)

    if item.type == ChatWorkflowItemType.RENDER:
        ctx["render_type"] = item.render_type
        response = _noop_response(responses)
        if response is None:
            raise TransitionError(NO_VALID_INPUT, ctx)
    elif item.type == ChatWorkflowItemType.QUESTION:
        value = response.answer_value
        ctx["answer_selection"] = value

    if (
        response.chat_workflow_item_id != item.id
        or response.type not in item.available_response_types()
    ):
        raise TransitionError(RESPONSE_NOT_VALID, ctx)

    return Transition(
        response=response,
        next_item_id=response.next_chat_workflow_item_id,
        input=value,
        context=ctx,
    )


class ResponseProcessor:
    """Moves a chat session along the workflow graph."""

    def __init__(self, db: AsyncSession, runtime: ChatSessionRuntime | None = None) -> None:
        """Initialize response processor.

        Args:
            db: Database session
            runtime: Session runtime sharing the same database session
        """
        self.db = db
        self.runtime = runtime or ChatSessionRuntime(db)
        self.responses = ChatWorkflowResponseRepository(db)
        self.interactions = ChatWorkflowInteractionRepository(db)

    @translate_storage_errors
    async def process_response(
        self,
        session: ChatSession,
        item: ChatWorkflowItem,
        chosen: ChatWorkflowResponse | None = None,
        raw_input: str | None = None,
    ) -> ChatWorkflowInteraction:
        """Apply one user message to a session.

        On failure only the context (with ``last_input``) is saved; the
        session position is unchanged and nothing is logged as an
        interaction. On success the new position and the interaction are
        committed together.

        Args:
            session: Chat session
            item: Item the session is positioned on
            chosen: Response explicitly picked by the user
            raw_input: Free text sent by the user

        Returns:
            Logged interaction

        Raises:
            BusinessProcessError: If the message does not resolve to a valid
                response or the session has expired
        """
        responses = await self.responses.get_by_item(item.id)

        try:
            transition = resolve_transition(session.context, item, responses, chosen, raw_input)
        except TransitionError as e:
            await self.runtime.update(session, context=e.context)
            logger.warning(
                "chat_response_rejected",
                chat_session_id=str(session.id),
                chat_workflow_item_id=str(item.id),
                reason=e.message,
            )
            raise BusinessProcessError(e.message) from e

        await self.runtime.update(
            session,
            commit=False,
            chat_workflow_item_id=transition.next_item_id,
            context=transition.context,
        )
        interaction = await self.interactions.create(
            chat_workflow_item_id=item.id,
            chat_workflow_response_id=transition.response.id,
            chat_session_id=session.id,
            input=transition.input,
        )
        await self.db.commit()

        logger.info(
            "chat_response_processed",
            chat_session_id=str(session.id),
            chat_workflow_item_id=str(item.id),
            chat_workflow_response_id=str(transition.response.id),
            next_chat_workflow_item_id=(
                str(transition.next_item_id) if transition.next_item_id else None
            ),
        )
        return interaction
