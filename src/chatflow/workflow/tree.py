"""Cycle-safe rendering of a chat workflow graph into nested displays.

A workflow graph may contain cycles and convergent paths. Every item is
expanded at most once per render; later references to an already expanded
item become a ``multiple_references`` marker instead.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from chatflow.db.models import ChatWorkflow, ChatWorkflowItem, ChatWorkflowResponse

MULTIPLE_REFERENCES = "multiple_references"


@dataclass
class WorkflowGraph:
    """Arena holding every item and response of one workflow.

    Attributes:
        items: Items keyed by id
        responses_by_item: Outgoing responses per item id, sorted by rank
    """

    items: dict[UUID, ChatWorkflowItem] = field(default_factory=dict)
    responses_by_item: dict[UUID, list[ChatWorkflowResponse]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        items: list[ChatWorkflowItem],
        responses: list[ChatWorkflowResponse],
    ) -> WorkflowGraph:
        graph = cls(items={item.id: item for item in items})
        for response in responses:
            graph.responses_by_item.setdefault(response.chat_workflow_item_id, []).append(
                response
            )
        for siblings in graph.responses_by_item.values():
            siblings.sort(key=lambda r: r.rank)
        return graph

    def responses(self, item_id: UUID) -> list[ChatWorkflowResponse]:
        return self.responses_by_item.get(item_id, [])


def _json_value(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def item_attributes(item: ChatWorkflowItem) -> dict[str, Any]:
    """Flat, JSON ready attributes of an item."""
    return {
        "id": _json_value(item.id),
        "chat_workflow_id": _json_value(item.chat_workflow_id),
        "item_type": item.item_type,
        "message": item.message,
        "render_type": item.render_type,
        "response_wait": item.response_wait,
        "created_at": _json_value(item.created_at),
        "updated_at": _json_value(item.updated_at),
    }


def response_attributes(response: ChatWorkflowResponse) -> dict[str, Any]:
    """Flat, JSON ready attributes of a response."""
    return {
        "id": _json_value(response.id),
        "chat_workflow_item_id": _json_value(response.chat_workflow_item_id),
        "response_type": response.response_type,
        "response": response.response,
        "answer_value": response.answer_value,
        "next_chat_workflow_item_id": _json_value(response.next_chat_workflow_item_id),
        "rank": response.rank,
        "created_at": _json_value(response.created_at),
        "updated_at": _json_value(response.updated_at),
    }


def render_item(
    root_id: UUID,
    graph: WorkflowGraph,
    rendered: set[UUID] | None = None,
) -> dict[str, Any]:
    """Render the subgraph reachable from an item.

    The traversal is depth first in rank order and runs on an explicit
    stack, so arbitrarily deep graphs render without recursion.

    Args:
        root_id: Item to start from
        graph: Workflow arena
        rendered: Ids already expanded during this render, shared and
            updated in place

    Returns:
        Item display whose ``tree`` lists its response displays

    Raises:
        KeyError: If root_id is not part of the graph
    """
    if rendered is None:
        rendered = set()

    def expand(item_id: UUID) -> tuple[dict[str, Any], Iterator[ChatWorkflowResponse]]:
        rendered.add(item_id)
        node = item_attributes(graph.items[item_id])
        node["tree"] = []
        return node, iter(graph.responses(item_id))

    root, root_responses = expand(root_id)
    stack = [(root, root_responses)]

    while stack:
        node, pending = stack[-1]
        response = next(pending, None)
        if response is None:
            stack.pop()
            continue

        display = response_attributes(response)
        node["tree"].append(display)

        next_id = response.next_chat_workflow_item_id
        if next_id is None or next_id not in graph.items:
            display["tree"] = {}
        elif next_id in rendered:
            display["tree"] = {"id": str(next_id), "type": MULTIPLE_REFERENCES}
        else:
            child, child_responses = expand(next_id)
            display["tree"] = child
            stack.append((child, child_responses))

    return root


def render_workflow(workflow: ChatWorkflow, graph: WorkflowGraph) -> dict[str, Any]:
    """Render a workflow display, expanding the tree from its initial item.

    Args:
        workflow: Workflow to render
        graph: Arena of the workflow's items and responses

    Returns:
        Workflow display; ``tree`` is empty when no initial item is set
    """
    tree: dict[str, Any] = {}
    initial_id = workflow.initial_chat_workflow_item_id
    if initial_id is not None and initial_id in graph.items:
        tree = render_item(initial_id, graph)

    return {
        "id": _json_value(workflow.id),
        "name": workflow.name,
        "status": workflow.status,
        "initial_chat_workflow_item_id": _json_value(initial_id),
        "created_at": _json_value(workflow.created_at),
        "updated_at": _json_value(workflow.updated_at),
        "tree": tree,
    }
