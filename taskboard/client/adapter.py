"""Bridges the client state to the Taskboard API.

Local storage is read first (``hydrate``) and the API second (``refresh``);
the two are never reconciled, so whichever lands last wins in memory.
A failed call leaves memory and local storage exactly as they were.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from taskboard.client.api import ApiError, TaskApiClient
from taskboard.client.state import AppState
from taskboard.client.storage import LocalStorage
from taskboard.config import Settings

logger = logging.getLogger(__name__)


def parse_due_date(value: date | str) -> date:
    """Read a form value as a calendar day; the whole string must be a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


class TaskClientAdapter:
    def __init__(self, api: TaskApiClient, state: AppState) -> None:
        self.api = api
        self.state = state
        self._in_flight: set[str] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TaskClientAdapter":
        """Adapter for the configured API URL and local storage file."""
        state = AppState.from_storage(LocalStorage(settings.storage_path))
        return cls(TaskApiClient.from_settings(settings), state)

    def close(self) -> None:
        self.api.close()

    def is_busy(self, action: str) -> bool:
        """Whether the control for ``action`` should be disabled."""
        return action in self._in_flight

    def _perform(self, action: str, request: Callable[[], Any], failure_title: str) -> Any | None:
        if action in self._in_flight:
            logger.debug("Ignoring %s, a request is already in flight", action)
            return None
        self._in_flight.add(action)
        self.state.loading = True
        try:
            return request()
        except ApiError as exc:
            logger.warning("%s failed status=%s: %s", action, exc.status_code, exc.message)
            self.state.notify(failure_title, exc.message, variant="destructive")
            return None
        finally:
            self._in_flight.discard(action)
            self.state.loading = bool(self._in_flight)

    def _check_draft(self, title: str, due_date: date | str) -> tuple[str, date] | None:
        title = (title or "").strip()
        if not title:
            self.state.notify("Missing Title", "Please enter a task title.", variant="destructive")
            return None
        try:
            return title, parse_due_date(due_date)
        except ValueError:
            self.state.notify("Invalid Date", "Please enter a valid due date.", variant="destructive")
            return None

    # -- loading --

    def hydrate(self) -> bool:
        """Load cached tasks into memory without touching the network."""
        loaded = self.state.load_tasks_from_storage()
        logger.debug("Hydrated %d cached tasks", len(self.state.tasks) if loaded else 0)
        return loaded

    def refresh(self) -> bool:
        tasks = self._perform("refresh", self.api.list_tasks, "Error")
        if tasks is None:
            return False
        self.state.set_tasks(tasks)
        return True

    # -- mutations --

    def create_task(
        self,
        title: str,
        due_date: date | str,
        description: str | None = None,
        priority: str = "medium",
    ) -> dict[str, Any] | None:
        draft = self._check_draft(title, due_date)
        if draft is None:
            return None
        title, day = draft
        task = self._perform(
            "create",
            lambda: self.api.create_task(
                title=title,
                due_date=day,
                description=(description or "").strip() or None,
                priority=priority,
            ),
            "Error",
        )
        if task is None:
            return None
        self.state.add_task(task)
        self.state.notify("Task Created", "Your new task has been added successfully.")
        return task

    def edit_task(
        self,
        task_id: int,
        title: str,
        due_date: date | str,
        priority: str,
        description: str | None = None,
    ) -> dict[str, Any] | None:
        draft = self._check_draft(title, due_date)
        if draft is None:
            return None
        title, day = draft
        task = self._perform(
            f"edit:{task_id}",
            lambda: self.api.update_task(
                task_id,
                title=title,
                due_date=day,
                description=(description or "").strip() or None,
                priority=priority,
            ),
            "Error",
        )
        if task is None:
            return None
        self.state.update_task(task)
        self.state.notify("Task Updated", f"“{task['title']}” was saved.")
        return task

    def toggle_complete(self, task_id: int) -> dict[str, Any] | None:
        current = self.state.find_task(task_id)
        if current is None:
            self.state.notify("Error", "Task not found", variant="destructive")
            return None
        completed = not current.get("completed", False)
        task = self._perform(
            f"toggle:{task_id}",
            lambda: self.api.set_completed(task_id, completed),
            "Error",
        )
        if task is None:
            return None
        self.state.update_task(task)
        if task["completed"]:
            self.state.notify("Task marked complete", f"“{task['title']}” has been completed.")
        else:
            self.state.notify("Task marked incomplete", f"“{task['title']}” has been reopened.")
        return task

    def delete_task(self, task_id: int) -> bool:
        result = self._perform(f"delete:{task_id}", lambda: self.api.delete_task(task_id), "Error")
        if result is None:
            return False
        title = (self.state.find_task(task_id) or {}).get("title", "Task")
        self.state.delete_task(task_id)
        self.state.notify("Task deleted", f"“{title}” was marked as deleted.", variant="destructive")
        return True

    # -- selection --

    def select_date(self, selected: date | str | None) -> None:
        self.state.select_date(selected)
