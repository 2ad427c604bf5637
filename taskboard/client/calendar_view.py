"""Pure derivations from the task collection for calendar rendering."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

TaskDict = Mapping[str, Any]


@dataclass(frozen=True)
class DaySummary:
    """How many tasks fall due on one day and how many of them are done."""

    count: int = 0
    completed_count: int = 0

    @property
    def has_tasks(self) -> bool:
        return self.count > 0

    @property
    def all_completed(self) -> bool:
        return self.has_tasks and self.completed_count == self.count

    @property
    def marker(self) -> str | None:
        """Cell annotation: ``"check"`` when everything is done, ``"dot"`` otherwise."""
        if not self.has_tasks:
            return None
        return "check" if self.all_completed else "dot"


def to_date(value: date | str) -> date:
    """Read a calendar date, ignoring any time part of an ISO string."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def day_summaries(tasks: Iterable[TaskDict]) -> dict[date, DaySummary]:
    counts: dict[date, int] = {}
    completed: dict[date, int] = {}
    for task in tasks:
        day = to_date(task["due_date"])
        counts[day] = counts.get(day, 0) + 1
        if task.get("completed"):
            completed[day] = completed.get(day, 0) + 1
    return {
        day: DaySummary(count=count, completed_count=completed.get(day, 0))
        for day, count in counts.items()
    }


def visible_tasks(tasks: Iterable[TaskDict], selected_date: date | None) -> list[TaskDict]:
    """Tasks due on ``selected_date``, or all of them when no date is selected."""
    if selected_date is None:
        return list(tasks)
    return [task for task in tasks if to_date(task["due_date"]) == selected_date]


def day_label(day: date, today: date | None = None) -> str:
    today = today or date.today()
    if day == today:
        return "Today's Tasks"
    if day < today:
        return "Past Tasks"
    return "Upcoming Tasks"
