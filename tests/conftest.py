"""Pytest fixtures for the Taskboard tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from taskboard.client.adapter import TaskClientAdapter
from taskboard.client.api import TaskApiClient
from taskboard.client.state import AppState
from taskboard.client.storage import LocalStorage
from taskboard.config import Settings
from taskboard.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}",
        storage_path=str(tmp_path / "local_storage.json"),
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Create a test client for a fresh API instance."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def storage(settings: Settings) -> LocalStorage:
    return LocalStorage(settings.storage_path)


@pytest.fixture
def state(storage: LocalStorage) -> AppState:
    return AppState.from_storage(storage)


@pytest.fixture
def adapter(client: TestClient, state: AppState) -> TaskClientAdapter:
    """Adapter talking to the in-process API."""
    return TaskClientAdapter(TaskApiClient(client), state)
