"""Chat workflow editing endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from ..dependencies import CurrentUserId, Store
from ..schemas import (
    ChatWorkflowCreate,
    ChatWorkflowUpdate,
    DomainEventResponse,
    WorkflowDetailResponse,
    WorkflowResponse,
)

router = APIRouter(prefix="/chat_workflows", tags=["chat_workflows"])


@router.get(
    "",
    response_model=list[WorkflowResponse],
    summary="List chat workflows",
)
async def list_chat_workflows(
    store: Store,
    user_id: CurrentUserId,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> list[WorkflowResponse]:
    """List chat workflows ordered by name."""
    workflows = await store.list_workflows(limit=limit, offset=offset)
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.get(
    "/{chat_workflow_id}",
    response_model=WorkflowDetailResponse,
    summary="Get chat workflow with its rendered graph",
)
async def get_chat_workflow(
    chat_workflow_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowDetailResponse:
    """Get a chat workflow and the tree rendered from its initial item.

    Args:
        chat_workflow_id: Workflow UUID
        store: Graph store
        user_id: Current user ID

    Returns:
        Workflow display
    """
    workflow = await store.find_workflow(chat_workflow_id)
    return WorkflowDetailResponse.model_validate(await store.display_workflow(workflow))


@router.get(
    "/{chat_workflow_id}/events",
    response_model=list[DomainEventResponse],
    summary="List the audit events of a chat workflow",
)
async def list_chat_workflow_events(
    chat_workflow_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> list[DomainEventResponse]:
    """List creation and publication events of a workflow, oldest first."""
    workflow = await store.find_workflow(chat_workflow_id)
    events = await store.workflow_history(workflow)
    return [DomainEventResponse.model_validate(e) for e in events]

@router.post(
    "",
    response_model=WorkflowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a chat workflow",
)
async def create_chat_workflow(
    request: ChatWorkflowCreate,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowResponse:
    """Create a draft chat workflow."""
    workflow = await store.create_workflow(request.name, user_id=user_id)
    return WorkflowResponse.model_validate(workflow)


@router.patch(
    "/{chat_workflow_id}",
    response_model=WorkflowResponse,
    summary="Update a chat workflow",
)
async def update_chat_workflow(
    chat_workflow_id: UUID,
    request: ChatWorkflowUpdate,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowResponse:
    """Rename a workflow or change its initial item."""
    workflow = await store.find_workflow(chat_workflow_id)
    workflow = await store.update_workflow(workflow, request.model_dump(exclude_unset=True))
    return WorkflowResponse.model_validate(workflow)


@router.post(
    "/{chat_workflow_id}/publish",
    response_model=WorkflowResponse,
    summary="Publish a chat workflow",
)
async def publish_chat_workflow(
    chat_workflow_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> WorkflowResponse:
    """Publish a workflow so chat sessions can be started on it."""
    workflow = await store.find_workflow(chat_workflow_id)
    workflow = await store.publish(workflow, user_id=user_id)
    return WorkflowResponse.model_validate(workflow)


@router.delete(
    "/{chat_workflow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a chat workflow",
)
async def delete_chat_workflow(
    chat_workflow_id: UUID,
    store: Store,
    user_id: CurrentUserId,
) -> None:
    """Delete a workflow with its items, responses and sessions."""
    workflow = await store.find_workflow(chat_workflow_id)
    await store.destroy_workflow(workflow, user_id=user_id)
