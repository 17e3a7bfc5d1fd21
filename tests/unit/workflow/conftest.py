"""Workflow engine fixtures."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from chatflow.db.models import (
    ChatWorkflow,
    ChatWorkflowItem,
    ChatWorkflowItemType,
    ChatWorkflowResponse,
    ChatWorkflowResponseType,
)
from chatflow.workflow import GraphStore


@dataclass
class QuestionWorkflow:
    """Published workflow: question Q with answers A1 -> message M and A2 -> end."""

    workflow: ChatWorkflow
    question: ChatWorkflowItem
    message: ChatWorkflowItem
    answer_one: ChatWorkflowResponse
    answer_two: ChatWorkflowResponse
    message_noop: ChatWorkflowResponse


async def build_question_workflow(store: GraphStore, name: str = "support") -> QuestionWorkflow:
    workflow = await store.create_workflow(name)
    question = await store.create_item(
        workflow.id, ChatWorkflowItemType.QUESTION, message="Need anything, {last_input}?"
    )
    message = await store.create_item(
        workflow.id, ChatWorkflowItemType.MESSAGE, message="You said {last_input}"
    )
    answer_one = await store.create_response(
        question.id,
        ChatWorkflowResponseType.ANSWER,
        response="Great",
        answer_value="yes",
        next_chat_workflow_item_id=message.id,
    )
    answer_two = await store.create_response(
        question.id,
        ChatWorkflowResponseType.ANSWER,
        response="Bye",
        answer_value="no",
    )
    message_noop = (await store.responses_for_item(message.id))[0]
    workflow = await store.update_workflow(workflow, {"initial_chat_workflow_item_id": question.id})
    workflow = await store.publish(workflow)
    return QuestionWorkflow(
        workflow=workflow,
        question=question,
        message=message,
        answer_one=answer_one,
        answer_two=answer_two,
        message_noop=message_noop,
    )


@pytest.fixture
async def question_workflow(store: GraphStore) -> QuestionWorkflow:
    """Published question/answer workflow."""
    return await build_question_workflow(store)
