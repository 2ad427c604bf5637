"""Pydantic models for the Taskboard API."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskFields(BaseModel):
    """Mutable task fields shared by the create and update bodies."""

    title: str = Field(
        ...,
        max_length=200,
        description="The task title (required, 1-200 characters)",
    )
    description: str | None = Field(default=None, description="Optional free-text details")
    due_date: date = Field(..., description="Calendar day the task is due (YYYY-MM-DD)")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class TaskCreate(TaskFields):
    """Request body for creating a new task."""


class TaskUpdate(TaskFields):
    """Request body for replacing a task's mutable fields."""

    priority: Priority = Field(..., description="Task priority; required on every replace")


class TaskCompletion(BaseModel):
    """Request body for the completion toggle."""

    completed: bool = Field(..., description="New completion status")


class Task(BaseModel):
    """A task as returned by the API and mirrored by clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Server-generated task id")
    title: str
    description: str | None = None
    due_date: date
    priority: Priority
    completed: bool = Field(default=False, description="Whether the task has been completed")
    created_at: datetime = Field(..., description="When the task was created")
    updated_at: datetime = Field(..., description="When the task was last updated")
    deleted_at: datetime | None = Field(default=None, description="Soft-delete timestamp")

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands timestamps back without an offset; they are stored as UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str


class ErrorResponse(BaseModel):
    """Body of every failure response."""

    error: str


class HealthResponse(BaseModel):
    """Response from the health check endpoint."""

    status: str = "healthy"
    version: str = "1.0.0"
