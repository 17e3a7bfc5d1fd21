"""FastAPI application factory and configuration."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from chatflow.cache import close_redis, init_redis
from chatflow.config import get_api_settings, get_database_settings
from chatflow.db.session import close_db, init_db
from chatflow.events import LoggingEventHandler, get_event_bus
from chatflow.utils import configure_logging

from .auth import setup_auth
from .handlers import register_exception_handlers
from .middleware import LoggingMiddleware, RequestIDMiddleware
from .routers import (
    chat_router,
    chat_sessions_router,
    chat_workflow_items_router,
    chat_workflow_responses_router,
    chat_workflows_router,
    health_router,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Opens the database engine and Redis pool and wires the audit event
    logger onto the event bus.

    Args:
        app: FastAPI application

    Yields:
        None
    """
    logger.info("starting_application")

    db_settings = get_database_settings()
    manager = init_db(
        db_settings.url,
        pool_size=db_settings.pool_size,
        max_overflow=db_settings.max_overflow,
        echo=db_settings.echo,
    )
    if db_settings.create_tables:
        await manager.create_all()

    await init_redis()

    event_bus = get_event_bus()
    event_bus.subscribe_all(LoggingEventHandler().handle)

    yield

    logger.info("shutting_down_application")
    event_bus.clear()
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_api_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs)

    app = FastAPI(
        title=settings.title,
        description=settings.description,
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Health check endpoints"},
            {"name": "chat_workflows", "description": "Chat workflow editing"},
            {"name": "chat_workflow_items", "description": "Chat workflow item editing"},
            {"name": "chat_workflow_responses", "description": "Chat workflow response editing"},
            {"name": "chat_sessions", "description": "Chat session management"},
            {"name": "chat", "description": "Real-time chat WebSocket"},
        ],
    )

    # Register middleware (order matters - first added = last executed)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(LoggingMiddleware)
    setup_auth(app)
    app.add_middleware(RequestIDMiddleware)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    # Health checks (no prefix)
    app.include_router(health_router)

    api_prefix = settings.api_prefix
    app.include_router(chat_workflows_router, prefix=api_prefix)
    app.include_router(chat_workflow_items_router, prefix=api_prefix)
    app.include_router(chat_workflow_responses_router, prefix=api_prefix)
    app.include_router(chat_sessions_router, prefix=api_prefix)
    app.include_router(chat_router, prefix=api_prefix)

    logger.info(
        "application_configured",
        title=settings.title,
        version=settings.version,
        debug=settings.debug,
    )

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_api_settings()
    uvicorn.run(
        "chatflow.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,  # structlog handles logging
    )
