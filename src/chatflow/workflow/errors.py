"""Domain errors raised by the chat workflow engine."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


class WorkflowError(Exception):
    """Base class for chat workflow errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    """One or more fields failed validation.

    Attributes:
        errors: Messages keyed by field name
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        """Initialize validation error.

        Args:
            errors: Messages keyed by field name
        """
        summary = "; ".join(
            f"{field}: {message}" for field, messages in errors.items() for message in messages
        )
        super().__init__(summary or "Validation failed")
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> ValidationError:
        return cls({field: [message]})


class BusinessProcessError(WorkflowError):
    """A rule of the conversation or graph lifecycle was violated."""


class NotFoundError(WorkflowError):
    """A referenced record does not exist."""

    def __init__(self, resource: str, resource_id: Any) -> None:
        """Initialize not found error.

        Args:
            resource: Resource type (e.g., "ChatWorkflow")
            resource_id: Resource identifier
        """
        super().__init__(f"{resource} with id '{resource_id}' does not exist")
        self.resource = resource
        self.resource_id = resource_id


class StorageError(WorkflowError):
    """The database rejected or failed an operation."""


def translate_storage_errors(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Roll back and re-raise SQLAlchemy failures as StorageError.

    The wrapped coroutine must be a method of an object exposing the
    async session as ``self.db``.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            db = getattr(args[0], "db", None)
            if db is not None:
                await db.rollback()
            logger.error(
                "storage_error",
                operation=func.__qualname__,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(str(e)) from e

    return wrapper
