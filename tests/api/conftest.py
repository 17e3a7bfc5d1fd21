"""API test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool

from chatflow.api.dependencies import get_db
from chatflow.api.handlers import register_exception_handlers
from chatflow.api.middleware import RequestIDMiddleware
from chatflow.api.routers import (
    chat_sessions_router,
    chat_workflow_items_router,
    chat_workflow_responses_router,
    chat_workflows_router,
    health_router,
)
from chatflow.cache import RedisClient
from chatflow.db.models import Base
from chatflow.db.session import DatabaseSessionManager

API_PREFIX = "/api/v1"
USER_ID = "user-123"


class MockRedisClient:
    """Mock Redis client for testing."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}

    async def sadd(self, key: str, *values: str) -> int:
        self._data.setdefault(key, set()).update(values)
        return len(values)

    async def srem(self, key: str, *values: str) -> int:
        members = self._data.get(key, set())
        removed = len(members & set(values))
        members.difference_update(values)
        return removed

    async def smembers(self, key: str) -> set[str]:
        return set(self._data.get(key, set()))

    async def expire(self, key: str, seconds: int) -> bool:
        if key not in self._data:
            return False
        self.ttls[key] = seconds
        return True

    async def ping(self) -> bool:
        return True


@pytest.fixture
def mock_redis() -> MockRedisClient:
    """Create mock Redis client."""
    return MockRedisClient()


@pytest.fixture
def redis_client(mock_redis: MockRedisClient) -> RedisClient:
    """Redis client wired to the in-memory double."""
    client = RedisClient("redis://localhost:6379/0")
    client._client = mock_redis
    return client


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """File backed sqlite database with every table created."""
    path = tmp_path / "chatflow.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def db_manager(database_url: str) -> DatabaseSessionManager:
    """Session manager opening a fresh connection per session."""
    return DatabaseSessionManager(database_url, poolclass=NullPool)


@pytest.fixture
def app(db_manager: DatabaseSessionManager) -> FastAPI:
    """Create test FastAPI app without lifespan side effects."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router)
    for router in (
        chat_workflows_router,
        chat_workflow_items_router,
        chat_workflow_responses_router,
        chat_sessions_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async for session in db_manager.get_session():
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client authenticated through the development user header."""
    with TestClient(
        app,
        headers={"X-User-ID": USER_ID},
        raise_server_exceptions=False,
    ) as client:
        yield client


class ApiHelper:
    """Builds workflow graphs through the HTTP API."""

    def __init__(self, client: TestClient) -> None:
        self.client = client

    def post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        response = self.client.post(f"{API_PREFIX}{path}", json=body)
        assert response.status_code in (200, 201), response.text
        return response.json()

    def workflow(self, name: str = "support") -> dict[str, Any]:
        return self.post("/chat_workflows", {"name": name})

    def item(self, workflow_id: str, item_type: str, **fields: Any) -> dict[str, Any]:
        return self.post(
            "/chat_workflow_items",
            {"chat_workflow_id": workflow_id, "item_type": item_type, **fields},
        )

    def answer(self, item_id: str, value: str, **fields: Any) -> dict[str, Any]:
        return self.post(
            "/chat_workflow_responses",
            {
                "chat_workflow_item_id": item_id,
                "response_type": "answer",
                "answer_value": value,
                **fields,
            },
        )

    def published_question(self, name: str = "support") -> dict[str, Any]:
        """Published workflow with one question answered yes or no."""
        workflow = self.workflow(name)
        question = self.item(workflow["id"], "question", message="Ready?")
        yes = self.answer(question["id"], "yes")
        no = self.answer(question["id"], "no")
        self.client.patch(
            f"{API_PREFIX}/chat_workflows/{workflow['id']}",
            json={"initial_chat_workflow_item_id": question["id"]},
        )
        workflow = self.post(f"/chat_workflows/{workflow['id']}/publish", {})
        return {"workflow": workflow, "question": question, "yes": yes, "no": no}


@pytest.fixture
def api(client: TestClient) -> ApiHelper:
    """HTTP helper bound to the test client."""
    return ApiHelper(client)
