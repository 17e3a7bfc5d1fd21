"""Placeholder substitution for item messages and response texts."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Context keys that may appear as {key} placeholders
MESSAGE_REPLACEMENT_HELPERS = ("last_input", "error_message")


def render_template(text: str | None, context: Mapping[str, Any] | None) -> str | None:
    """Substitute session context values into a template.

    Each ``{helper}`` placeholder is replaced with the matching context value
    when it is a string and with an empty string otherwise.

    Args:
        text: Template text, passed through when None
        context: Session context

    Returns:
        Rendered text
    """
    if text is None:
        return None
    context = context or {}
    for helper in MESSAGE_REPLACEMENT_HELPERS:
        value = context.get(helper)
        text = text.replace(f"{{{helper}}}", value if isinstance(value, str) else "")
    return text
