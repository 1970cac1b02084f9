"""Task-related exceptions."""

from .base import NotFoundError, ValidationError


class TaskNotFoundError(NotFoundError):
    """Raised when a task is absent or the caller may not see it."""

    def __init__(self, message: str = "Task not found"):
        super().__init__(message=message, error_code="TASK_NOT_FOUND")


class InvalidSectionError(ValidationError):
    """Raised when a section does not belong to the task's project."""

    def __init__(self, message: str = "Section does not belong to the project"):
        super().__init__(message=message)


class InvalidAssigneeError(ValidationError):
    """Raised when the assignee is not a member of the project's workspace."""

    def __init__(self, message: str = "Assignee is not a member of the workspace"):
        super().__init__(message=message)
