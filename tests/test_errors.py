"""Tests for the failure responses of the task endpoints."""

import asyncio
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from taskboard import errors
from taskboard.main import get_task_store
from taskboard.store import TaskStore


class BrokenSession:
    """Session double whose database is unreachable."""

    def __init__(self) -> None:
        self.rolled_back = False

    def add(self, instance) -> None:
        pass

    async def execute(self, statement):
        raise OperationalError(str(statement), {}, Exception("database is locked"))

    async def commit(self) -> None:
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    async def rollback(self) -> None:
        self.rolled_back = True


@pytest.fixture
def broken_session(client: TestClient) -> Iterator[BrokenSession]:
    session = BrokenSession()
    client.app.dependency_overrides[get_task_store] = lambda: TaskStore(session)
    yield session
    client.app.dependency_overrides.clear()


@pytest.mark.parametrize(
    ("method", "path", "body", "message"),
    [
        ("POST", "/tasks", {"title": "x", "due_date": "2025-04-01"}, "Failed to create task"),
        ("GET", "/tasks", None, "Failed to fetch tasks"),
        ("PUT", "/tasks/1", {"title": "x", "due_date": "2025-04-01"}, "Failed to update task"),
        ("PATCH", "/tasks/1/complete", {"completed": True}, "Failed to toggle task"),
        ("DELETE", "/tasks/1", None, "Failed to delete task"),
    ],
)
def test_storage_failure_returns_fixed_message(
    client: TestClient, broken_session: BrokenSession, method, path, body, message
) -> None:
    """Test that database errors map to 500 without leaking details."""
    response = client.request(method, path, json=body)
    assert response.status_code == 500
    assert response.json() == {"error": message}
    assert "locked" not in response.text
    assert broken_session.rolled_back


def test_store_rejects_blank_title() -> None:
    store = TaskStore(BrokenSession())
    with pytest.raises(errors.ValidationError):
        asyncio.run(store.create(title="   ", due_date="2025-04-01"))


def test_store_rejects_bad_due_date() -> None:
    store = TaskStore(BrokenSession())
    with pytest.raises(errors.ValidationError):
        asyncio.run(store.create(title="Pay rent", due_date="April first"))


class OverflowingSession(BrokenSession):
    """Session double whose driver rejects a bound value outright."""

    async def execute(self, statement):
        raise OverflowError("Python int too large to convert to SQLite INTEGER")


def test_driver_value_errors_become_storage_errors() -> None:
    """Test that driver errors outside SQLAlchemy's hierarchy are still mapped."""
    session = OverflowingSession()
    with pytest.raises(errors.StorageError) as exc_info:
        asyncio.run(TaskStore(session).list_all())
    assert exc_info.value.message == "Failed to fetch tasks"
    assert session.rolled_back


def test_unexpected_errors_return_json(client: TestClient) -> None:
    """Test that failures nothing maps still answer with an error body."""

    class ExplodingStore:
        async def list_all(self):
            raise RuntimeError("secret internals")

    client.app.dependency_overrides[get_task_store] = ExplodingStore
    try:
        quiet_client = TestClient(client.app, raise_server_exceptions=False)
        response = quiet_client.get("/tasks")
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "secret" not in response.text
