"""Exception taxonomy shared by the task store and the HTTP layer."""


class TaskboardError(Exception):
    """Base class for all task management errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskboardError):
    """Input was rejected and can be corrected by the client."""

    status_code = 422


class NotFoundError(TaskboardError):
    """No active task matches the requested id."""

    status_code = 404

    def __init__(self, task_id: int) -> None:
        super().__init__("Task not found")
        self.task_id = task_id


class StorageError(TaskboardError):
    """The persistence layer failed; the message is safe to show clients."""

    status_code = 500
