"""Chat workflow engine core: graph store, renderer, sessions and transitions."""

from .errors import (
    BusinessProcessError,
    NotFoundError,
    StorageError,
    ValidationError,
    WorkflowError,
)
from .graph_store import GraphStore
from .processor import ResponseProcessor, Transition, TransitionError, resolve_transition
from .session_runtime import ChatSessionRuntime
from .templating import render_template
from .tree import WorkflowGraph, render_item, render_workflow

__all__ = [
    "WorkflowError",
    "ValidationError",
    "BusinessProcessError",
    "NotFoundError",
    "StorageError",
    "GraphStore",
    "ChatSessionRuntime",
    "ResponseProcessor",
    "Transition",
    "TransitionError",
    "resolve_transition",
    "render_template",
    "WorkflowGraph",
    "render_item",
    "render_workflow",
]
