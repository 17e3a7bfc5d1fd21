"""Chat workflow item editing endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from ..dependencies import CurrentUserId, Store
from ..schemas import (
    ChatWorkflowItemCreate,
    ChatWorkflowItemUpdate,
    WorkflowItemDetailResponse,
    WorkflowItemResponse,
)

router = APIRouter(prefix="/chat_workflow_items", tags=["chat_workflow_items"])


@router.get(
    "",
    response_model=list[WorkflowItemResponse],
    summary="List the items of a chat workflow",
)
async def list_chat_workflow_items(
    chat_workflow_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> list[WorkflowItemResponse]:
    """List the items of a workflow in creation order."""
    await store.find_workflow(chat_workflow_id)
    items = await store.items.get_by_workflow(chat_workflow_id)
    return [WorkflowItemResponse.model_validate(item) for item in items]


@router.get(
    "/{chat_workflow_item_id}",
    response_model=WorkflowItemDetailResponse,
    summary="Get an item with the graph reachable from it",
)
async def get_chat_workflow_item(
    chat_workflow_item_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowItemDetailResponse:
    """Get an item rendered as a tree of its responses."""
    item = await store.find_item(chat_workflow_item_id)
    return WorkflowItemDetailResponse.model_validate(await store.display_item(item))


@router.post(
    "",
    response_model=WorkflowItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an item to a chat workflow",
)
async def create_chat_workflow_item(
    request: ChatWorkflowItemCreate,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowItemResponse:
    """Add an item; message and render items get a noop response."""
    item = await store.create_item(
        chat_workflow_id=request.chat_workflow_id,
        item_type=request.item_type,
        message=request.message,
        render_type=request.render_type,
        response_wait=request.response_wait,
    )
    return WorkflowItemResponse.model_validate(item)


@router.patch(
    "/{chat_workflow_item_id}",
    response_model=WorkflowItemResponse,
    summary="Update an item",
)
async def update_chat_workflow_item(
    chat_workflow_item_id: UUID,
    request: ChatWorkflowItemUpdate,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowItemResponse:
    """Update the message, render type or response wait of an item."""
    item = await store.find_item(chat_workflow_item_id)
    item = await store.update_item(item, request.model_dump(exclude_unset=True))
    return WorkflowItemResponse.model_validate(item)


@router.delete(
    "/{chat_workflow_item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an item",
)
async def delete_chat_workflow_item(
    chat_workflow_item_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> None:
    """Delete an item and every edge leading to it."""
    item = await store.find_item(chat_workflow_item_id)
    await store.destroy_item(item)
