"""Health check endpoints."""

import structlog
from fastapi import APIRouter
from pydantic import BaseModel, Field
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from chatflow import __version__
from chatflow.cache import get_redis
from chatflow.db.session import get_session_manager

from ..exceptions import ServiceUnavailableError

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = __version__
    checks: dict[str, str] = Field(default_factory=dict)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check API health status.

    Returns:
        Health status response
    """
    return HealthResponse(status="healthy")


@router.get("/ready", response_model=HealthResponse)
async def readiness_check() -> HealthResponse:
    """Check that the database and Redis are reachable.

    Returns:
        Readiness status response

    Raises:
        ServiceUnavailableError: If a dependency does not answer
    """
    checks: dict[str, str] = {}

    try:
        manager = get_session_manager()
        async with manager.session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (RuntimeError, SQLAlchemyError) as e:
        logger.warning("readiness_database_failed", error=str(e))
        checks["database"] = "unavailable"

    try:
        checks["redis"] = "ok" if await get_redis().ping() else "unavailable"
    except (RuntimeError, RedisError) as e:
        logger.warning("readiness_redis_failed", error=str(e))
        checks["redis"] = "unavailable"

    failed = sorted(name for name, state in checks.items() if state != "ok")
    if failed:
        raise ServiceUnavailableError(", ".join(failed))
    return HealthResponse(status="ready", checks=checks)
