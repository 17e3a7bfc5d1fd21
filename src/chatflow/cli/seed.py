"""Default chat workflows installed by ``chatflow create-initial-chat-workflows``."""

from __future__ import annotations

import structlog

from chatflow.db.models import ChatWorkflow, ChatWorkflowItemType, ChatWorkflowResponseType
from chatflow.workflow import GraphStore

logger = structlog.get_logger()

WELCOME_WORKFLOW = "01_welcome"
SUPPORT_LINK = "Submit a request here and we'll get back to you soon."


async def create_welcome_workflow(store: GraphStore) -> ChatWorkflow | None:
    """Install and publish the welcome workflow unless it already exists.

    Graph:
        welcome message -> FAQ question
        FAQ question (refund / tickets / transfer) -> anything else question
        anything else question: "Nope" ends, "Yes" loops back to the FAQ

    Args:
        store: Graph store

    Returns:
        The new workflow, or None when it was already installed
    """
    if await store.find_workflow_by_name(WELCOME_WORKFLOW) is not None:
        logger.info("seed_workflow_exists", name=WELCOME_WORKFLOW)
        return None

    workflow = await store.create_workflow(WELCOME_WORKFLOW)

    welcome = await store.create_item(
        workflow.id,
        ChatWorkflowItemType.MESSAGE,
        message="Woot woot! You're going to the show!",
    )
    workflow = await store.update_workflow(
        workflow, {"initial_chat_workflow_item_id": welcome.id}
    )

    anything_else = await store.create_item(
        workflow.id,
        ChatWorkflowItemType.QUESTION,
        message="Anything else?",
        response_wait=3,
    )
    await store.create_response(
        anything_else.id,
        ChatWorkflowResponseType.ANSWER,
        response=(
            "Awesome! Enjoy the show!\n\n"
            f"If you need more help in the future: {SUPPORT_LINK}"
        ),
        answer_value="Nope! I'm good.",
        rank=1,
    )
    yes_please = await store.create_response(
        anything_else.id,
        ChatWorkflowResponseType.ANSWER,
        response="No problem! How can we help?",
        answer_value="Yes, please!",
        rank=2,
    )

    faq = await store.create_item(workflow.id, ChatWorkflowItemType.QUESTION)
    faq_answers = [
        (
            "Can I get a refund?",
            "We get it! Plans change. Generally all sales are final unless the show "
            f"cancels, but every venue is different. {SUPPORT_LINK}",
        ),
        (
            "Where are my tickets?",
            "Swipe right to view your tickets. On the day of the event your barcode "
            "will be available to scan at the door.",
        ),
        (
            "How do I send tickets to my friends?",
            "Swipe right and tap \"Transfer Tickets\" on any ticket. From there you can "
            "pick which tickets to send to a friend.",
        ),
    ]
    for rank, (answer_value, response) in enumerate(faq_answers, start=1):
        await store.create_response(
            faq.id,
            ChatWorkflowResponseType.ANSWER,
            response=response,
            answer_value=answer_value,
            next_chat_workflow_item_id=anything_else.id,
            rank=rank,
        )

    welcome_noop = (await store.responses_for_item(welcome.id))[0]
    await store.update_response(
        welcome_noop,
        {
            "response": "Before you go, make sure to check out our FAQ",
            "next_chat_workflow_item_id": faq.id,
        },
    )
    await store.update_response(yes_please, {"next_chat_workflow_item_id": faq.id})

    workflow = await store.publish(workflow)
    logger.info("seed_workflow_created", name=WELCOME_WORKFLOW, chat_workflow_id=str(workflow.id))
    return workflow
