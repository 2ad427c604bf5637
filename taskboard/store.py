"""Relational task storage.

Every public operation issues exactly one parameterized statement against the
``tasks`` table and commits it. Soft-deleted rows (``deleted_at`` set) are
invisible to listing, update and completion; deletion itself ignores that
flag so repeated deletes are harmless.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db_models import TaskRow
from taskboard.errors import StorageError, ValidationError
from taskboard.models import Priority, Task

logger = logging.getLogger(__name__)

# Range of a signed 64-bit INTEGER column.
MIN_TASK_ID = -(2**63)
MAX_TASK_ID = 2**63 - 1


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("title is required")
    return title


def _coerce_due_date(value: date | str) -> date:
    if isinstance(value, datetime):
        raise ValidationError("due_date must be a calendar date without a time")
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError(f"invalid due_date: {value!r}") from exc


def _storable_id(task_id: int) -> bool:
    return MIN_TASK_ID <= task_id <= MAX_TASK_ID


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    return description.strip() or None


class TaskStore:
    """Task repository bound to one session (one request)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _storage_errors(self, message: str) -> AsyncIterator[None]:
        try:
            yield
        except (SQLAlchemyError, OverflowError) as exc:
            logger.exception(message)
            await self.session.rollback()
            raise StorageError(message) from exc

    async def count(self) -> int:
        """Return the number of stored rows, deleted ones included."""
        async with self._storage_errors("Failed to count tasks"):
            result = await self.session.execute(select(func.count()).select_from(TaskRow))
            return int(result.scalar() or 0)

    async def list_all(self) -> list[Task]:
        """Return active tasks, most recently created first."""
        stmt = select(TaskRow).where(TaskRow.deleted_at.is_(None)).order_by(TaskRow.id.desc())
        async with self._storage_errors("Failed to fetch tasks"):
            result = await self.session.execute(stmt)
            rows = result.scalars().all()
        logger.debug("Fetched %d active tasks", len(rows))
        return [Task.model_validate(row) for row in rows]

    async def create(
        self,
        *,
        title: str,
        due_date: date | str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
    ) -> Task:
        """Insert a new task and return it with its generated id."""
        now = _utcnow()
        row = TaskRow(
            title=_clean_title(title),
            description=_clean_description(description),
            due_date=_coerce_due_date(due_date),
            priority=Priority(priority).value,
            completed=False,
            created_at=now,
            updated_at=now,
            deleted_at=None,
        )
        async with self._storage_errors("Failed to create task"):
            self.session.add(row)
            await self.session.commit()
        logger.info("Task created id=%s due_date=%s priority=%s", row.id, row.due_date, row.priority)
        return Task.model_validate(row)

    async def _update_active(self, task_id: int, values: dict, message: str) -> Task | None:
        if not _storable_id(task_id):
            return None
        stmt = (
            update(TaskRow)
            .where(TaskRow.id == task_id, TaskRow.deleted_at.is_(None))
            .values(**values, updated_at=_utcnow())
            .returning(TaskRow)
            .execution_options(synchronize_session=False)
        )
        async with self._storage_errors(message):
            result = await self.session.execute(stmt)
            row = result.scalar_one_or_none()
            await self.session.commit()
        return Task.model_validate(row) if row is not None else None

    async def update(
        self,
        task_id: int,
        *,
        title: str,
        due_date: date | str,
        priority: Priority,
        description: str | None = None,
    ) -> Task | None:
        """Replace the mutable fields of an active task. Returns None if not found."""
        values = {
            "title": _clean_title(title),
            "description": _clean_description(description),
            "due_date": _coerce_due_date(due_date),
            "priority": Priority(priority).value,
        }
        task = await self._update_active(task_id, values, "Failed to update task")
        if task is None:
            logger.info("Update skipped, no active task id=%s", task_id)
        else:
            logger.info("Task updated id=%s", task_id)
        return task

    async def set_completed(self, task_id: int, completed: bool) -> Task | None:
        """Set the completion flag of an active task. Returns None if not found."""
        task = await self._update_active(
            task_id, {"completed": bool(completed)}, "Failed to toggle task"
        )
        if task is None:
            logger.info("Completion skipped, no active task id=%s", task_id)
        else:
            logger.info("Task id=%s completed=%s", task_id, task.completed)
        return task

    async def soft_delete(self, task_id: int) -> int:
        """Stamp ``deleted_at`` on the row and return the affected row count.

        Unknown ids affect nothing and are not an error.
        """
        if not _storable_id(task_id):
            logger.info("Task deleted id=%s rows=0", task_id)
            return 0
        stmt = (
            update(TaskRow)
            .where(TaskRow.id == task_id)
            .values(deleted_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        async with self._storage_errors("Failed to delete task"):
            result = await self.session.execute(stmt)
            await self.session.commit()
        logger.info("Task deleted id=%s rows=%s", task_id, result.rowcount)
        return result.rowcount
