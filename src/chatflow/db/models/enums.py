"""Enums for database models."""

from enum import Enum


class ChatWorkflowStatus(str, Enum):
    """Chat workflow lifecycle status."""

    DRAFT = "draft"
    PUBLISHED = "published"


class ChatWorkflowItemType(str, Enum):
    """Kind of node in a chat workflow graph."""

    MESSAGE = "message"
    QUESTION = "question"
    RENDER = "render"
    DONE = "done"


class ChatWorkflowResponseType(str, Enum):
    """Kind of edge leaving a chat workflow item."""

    NOOP = "noop"
    ANSWER = "answer"


# Response types an item of each type may carry
AVAILABLE_RESPONSE_TYPES: dict[ChatWorkflowItemType, list[ChatWorkflowResponseType]] = {
    ChatWorkflowItemType.MESSAGE: [ChatWorkflowResponseType.NOOP],
    ChatWorkflowItemType.QUESTION: [ChatWorkflowResponseType.ANSWER],
    ChatWorkflowItemType.RENDER: [ChatWorkflowResponseType.NOOP],
    ChatWorkflowItemType.DONE: [],
}

# Response types that may be attached any number of times to one item
REPEATABLE_RESPONSE_TYPES = frozenset({ChatWorkflowResponseType.ANSWER})
