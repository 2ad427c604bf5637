"""HTTP client for the Taskboard API."""

import logging
from datetime import date
from typing import Any

import httpx

from taskboard.config import Settings

logger = logging.getLogger(__name__)

CONNECTION_ERROR = "Could not connect to the backend."


class ApiError(Exception):
    """A request failed, either in transport or with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TaskApiClient:
    """One method per endpoint; responses are returned as decoded JSON."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, settings: Settings, timeout: float = 10.0) -> "TaskApiClient":
        return cls(httpx.Client(base_url=settings.api_url, timeout=timeout))

    @property
    def base_url(self) -> str:
        return str(self._http.base_url).rstrip("/")

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        try:
            response = self._http.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(CONNECTION_ERROR) from exc

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(message or "Something went wrong.", response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Unexpected response from the backend.", response.status_code) from exc

    def list_tasks(self) -> list[dict[str, Any]]:
        return self._request("GET", "/tasks")

    def create_task(
        self,
        *,
        title: str,
        due_date: date | str,
        description: str | None = None,
        priority: str = "medium",
    ) -> dict[str, Any]:
        return self._request("POST", "/tasks", _task_body(title, due_date, description, priority))

    def update_task(
        self,
        task_id: int,
        *,
        title: str,
        due_date: date | str,
        priority: str,
        description: str | None = None,
    ) -> dict[str, Any]:
        return self._request(
            "PUT", f"/tasks/{task_id}", _task_body(title, due_date, description, priority)
        )

    def set_completed(self, task_id: int, completed: bool) -> dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}/complete", {"completed": completed})

    def delete_task(self, task_id: int) -> dict[str, Any]:
        return self._request("DELETE", f"/tasks/{task_id}")


def _task_body(
    title: str, due_date: date | str, description: str | None, priority: str
) -> dict[str, Any]:
    return {
        "title": title,
        "description": description,
        "due_date": due_date.isoformat() if isinstance(due_date, date) else due_date,
        "priority": priority,
    }
