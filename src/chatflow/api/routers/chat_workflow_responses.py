"""Chat workflow response editing endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from ..dependencies import CurrentUserId, Store
from ..schemas import (
    ChatWorkflowResponseCreate,
    ChatWorkflowResponseUpdate,
    WorkflowEdgeResponse,
)

router = APIRouter(prefix="/chat_workflow_responses", tags=["chat_workflow_responses"])


@router.get(
    "",
    response_model=list[WorkflowEdgeResponse],
    summary="List the responses of an item",
)
async def list_chat_workflow_responses(
    chat_workflow_item_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> list[WorkflowEdgeResponse]:
    """List the responses of an item ordered by rank."""
    await store.find_item(chat_workflow_item_id)
    responses = await store.responses_for_item(chat_workflow_item_id)
    return [WorkflowEdgeResponse.model_validate(r) for r in responses]


@router.get(
    "/{chat_workflow_response_id}",
    response_model=WorkflowEdgeResponse,
    summary="Get a response",
)
async def get_chat_workflow_response(
    chat_workflow_response_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowEdgeResponse:
    response = await store.find_response(chat_workflow_response_id)
    return WorkflowEdgeResponse.model_validate(response)


@router.post(
    "",
    response_model=WorkflowEdgeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a response to an item",
)
async def create_chat_workflow_response(
    request: ChatWorkflowResponseCreate,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowEdgeResponse:
    """Add a response at a rank; later siblings move down."""
    response = await store.create_response(**request.model_dump())
    return WorkflowEdgeResponse.model_validate(response)


@router.patch(
    "/{chat_workflow_response_id}",
    response_model=WorkflowEdgeResponse,
    summary="Update a response",
)
async def update_chat_workflow_response(
    chat_workflow_response_id: UUID,
    request: ChatWorkflowResponseUpdate,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowEdgeResponse:
    """Update a response, re-ranking its siblings when rank changes."""
    response = await store.find_response(chat_workflow_response_id)
    response = await store.update_response(response, request.model_dump(exclude_unset=True))
    return WorkflowEdgeResponse.model_validate(response)


@router.delete(
    "/{chat_workflow_response_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a response",
)
async def delete_chat_workflow_response(
    chat_workflow_response_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> None:
    """Delete a response and close the gap in sibling ranks."""
    response = await store.find_response(chat_workflow_response_id)
    await store.destroy_response(response)
