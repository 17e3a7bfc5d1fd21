"""Global exception handlers for FastAPI."""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chatflow.workflow.errors import (
    BusinessProcessError,
    NotFoundError,
    StorageError,
    ValidationError,
    WorkflowError,
)

from .exceptions import APIError
from .schemas import ErrorResponse

logger = structlog.get_logger()


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(
        request: Request,
        exc: APIError,
    ) -> JSONResponse:
        """Handle custom API errors."""
        request_id = _request_id(request)

        logger.warning(
            "api_error",
            request_id=request_id,
            code=exc.code,
            message=exc.message,
            detail=exc.detail,
        )

        detail_str = None
        if isinstance(exc.detail, dict):
            detail_str = exc.detail.get("detail")
        elif isinstance(exc.detail, str):
            detail_str = exc.detail

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.message,
                detail=detail_str,
                code=exc.code,
                request_id=request_id,
            ).model_dump(),
        )

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(
        request: Request,
        exc: WorkflowError,
    ) -> JSONResponse:
        """Map chat workflow domain errors onto HTTP responses.

        Args:
            request: Request instance
            exc: Domain error

        Returns:
            JSON error response
        """
        request_id = _request_id(request)
        errors = None

        if isinstance(exc, ValidationError):
            status_code, code, errors = 422, "VALIDATION_ERROR", exc.errors
        elif isinstance(exc, BusinessProcessError):
            status_code, code = 422, "BUSINESS_PROCESS_ERROR"
        elif isinstance(exc, NotFoundError):
            status_code, code = 404, "NOT_FOUND"
        elif isinstance(exc, StorageError):
            logger.error("storage_failure", request_id=request_id, error=exc.message)
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(
                    error="Internal server error",
                    code="STORAGE_ERROR",
                    request_id=request_id,
                ).model_dump(),
            )
        else:
            status_code, code = 400, "WORKFLOW_ERROR"

        logger.warning(
            "workflow_error",
            request_id=request_id,
            code=code,
            message=exc.message,
        )

        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=exc.message,
                code=code,
                request_id=request_id,
                errors=errors,
            ).model_dump(),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions."""
        request_id = _request_id(request)

        logger.warning(
            "http_error",
            request_id=request_id,
            status_code=exc.status_code,
            detail=exc.detail,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code=f"HTTP_{exc.status_code}",
                request_id=request_id,
            ).model_dump(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle request validation errors.

        Args:
            request: Request instance
            exc: RequestValidationError

        Returns:
            JSON error response with validation details
        """
        request_id = _request_id(request)

        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = ".".join(str(x) for x in error["loc"] if x != "body")
            errors.setdefault(loc, []).append(error["msg"])

        logger.warning(
            "validation_error",
            request_id=request_id,
            errors=errors,
        )

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="Validation error",
                detail="; ".join(f"{loc}: {', '.join(msgs)}" for loc, msgs in errors.items()),
                code="VALIDATION_ERROR",
                request_id=request_id,
                errors=errors,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unhandled exceptions."""
        request_id = _request_id(request)

        logger.exception(
            "unhandled_error",
            request_id=request_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                detail=None,
                code="INTERNAL_ERROR",
                request_id=request_id,
            ).model_dump(),
        )
