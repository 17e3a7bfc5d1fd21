"""Chat session endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from ..dependencies import CurrentUserId, Runtime
from ..exceptions import APIError, NotFoundError
from ..schemas import ChatInteractionResponse, ChatSessionCreate, ChatSessionResponse

router = APIRouter(prefix="/chat_sessions", tags=["chat_sessions"])


@router.post(
    "",
    response_model=ChatSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a chat session",
)
async def create_chat_session(
    request: ChatSessionCreate,
    runtime: Runtime,
    user_id: CurrentUserId,
) -> ChatSessionResponse:
    """Start a chat session on a published workflow.

    Args:
        request: Session creation request
        runtime: Chat session runtime
        user_id: Current user ID

    Returns:
        Created session positioned on the initial item
    """
    session = await runtime.create(
        user_id=user_id,
        chat_workflow_id=request.chat_workflow_id,
        context=request.context,
    )
    return ChatSessionResponse.model_validate(session)


@router.get(
    "/active",
    response_model=ChatSessionResponse,
    summary="Get the current user's active chat session",
)
async def get_active_chat_session(
    runtime: Runtime,
    user_id: CurrentUserId,
) -> ChatSessionResponse:
    """Get the most recent unexpired chat session of the current user."""
    session = await runtime.find_active_for_user(user_id)
    if session is None:
        raise APIError(
            message="No active chat session",
            code="NOT_FOUND",
            status_code=404,
        )
    return ChatSessionResponse.model_validate(session)


@router.get(
    "/{chat_session_id}/interactions",
    response_model=list[ChatInteractionResponse],
    summary="List the interactions of a chat session",
)
async def list_chat_session_interactions(
    chat_session_id: UUID,
    runtime: Runtime,
    user_id: CurrentUserId,
) -> list[ChatInteractionResponse]:
    """List the transitions taken in one of the current user's sessions."""
    session = await runtime.find(chat_session_id)
    if session.user_id != user_id:
        raise NotFoundError("ChatSession", chat_session_id)
    interactions = await runtime.interactions_for(session)
    return [ChatInteractionResponse.model_validate(i) for i in interactions]
