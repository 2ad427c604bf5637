"""Client-side application state.

``AppState`` is passed explicitly to whatever renders it. Task mutations
mirror the whole collection into local storage under ``TASKS_KEY``; the
theme flag is mirrored under ``THEME_KEY``.
"""

import itertools
import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from taskboard.client.calendar_view import DaySummary, day_summaries, to_date, visible_tasks
from taskboard.client.storage import LocalStorage

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
THEME_KEY = "theme"

_notice_ids = itertools.count(1)


def _is_cached_task(task: Any) -> bool:
    if not isinstance(task, dict) or "id" not in task:
        return False
    try:
        to_date(task["due_date"])
    except (KeyError, TypeError, ValueError):
        return False
    return True


@dataclass
class Notice:
    """A dismissible message for the user."""

    title: str
    description: str = ""
    variant: str = "default"
    id: int = field(default_factory=lambda: next(_notice_ids))


@dataclass
class AppState:
    storage: LocalStorage
    tasks: list[dict[str, Any]] = field(default_factory=list)
    selected_date: date | None = None
    is_dark: bool = False
    loading: bool = False
    notices: list[Notice] = field(default_factory=list)

    @classmethod
    def from_storage(cls, storage: LocalStorage) -> "AppState":
        """New state with the persisted theme; tasks are loaded by hydration."""
        return cls(storage=storage, is_dark=storage.get_item(THEME_KEY) == "dark")

    # -- tasks --

    def _persist_tasks(self) -> None:
        self.storage.set_item(TASKS_KEY, json.dumps(self.tasks))

    def set_tasks(self, tasks: list[dict[str, Any]]) -> None:
        self.tasks = list(tasks)

    def add_task(self, task: dict[str, Any]) -> None:
        self.tasks.insert(0, task)
        self._persist_tasks()

    def update_task(self, task: dict[str, Any]) -> None:
        for index, current in enumerate(self.tasks):
            if current["id"] == task["id"]:
                self.tasks[index] = task
                self._persist_tasks()
                return

    def delete_task(self, task_id: int) -> None:
        self.tasks = [task for task in self.tasks if task["id"] != task_id]
        self._persist_tasks()

    def find_task(self, task_id: int) -> dict[str, Any] | None:
        return next((task for task in self.tasks if task["id"] == task_id), None)

    def load_tasks_from_storage(self) -> bool:
        """Replace working memory with the cached collection, if there is one."""
        raw = self.storage.get_item(TASKS_KEY)
        if not raw:
            return False
        try:
            tasks = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable cached tasks")
            return False
        if not isinstance(tasks, list) or not all(_is_cached_task(task) for task in tasks):
            logger.warning("Ignoring malformed cached tasks")
            return False
        self.tasks = tasks
        return True

    # -- calendar --

    def select_date(self, selected: date | str | None) -> None:
        self.selected_date = to_date(selected) if selected is not None else None

    @property
    def visible_tasks(self) -> list[dict[str, Any]]:
        return visible_tasks(self.tasks, self.selected_date)

    @property
    def day_summaries(self) -> dict[date, DaySummary]:
        return day_summaries(self.tasks)

    # -- theme --

    def set_theme(self, is_dark: bool) -> None:
        self.is_dark = is_dark
        self.storage.set_item(THEME_KEY, "dark" if is_dark else "light")

    def toggle_theme(self) -> None:
        self.set_theme(not self.is_dark)

    # -- notices --

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)
        return notice

    def dismiss_notice(self, notice_id: int) -> None:
        self.notices = [notice for notice in self.notices if notice.id != notice_id]
