"""Project- and section-related exceptions."""

from .base import ConflictError, NotFoundError


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is absent or hidden from the caller."""

    def __init__(self, message: str = "Project not found or access denied"):
        super().__init__(message=message, error_code="PROJECT_NOT_FOUND")


class DuplicateProjectError(ConflictError):
    """Raised when a project name is already used in the workspace."""

    def __init__(self, message: str = "A project with this name already exists in the workspace"):
        super().__init__(message=message, error_code="DUPLICATE_PROJECT")


class ProjectHasTasksError(ConflictError):
    """Raised when deleting a project that still owns tasks."""

    def __init__(self, task_count: int):
        super().__init__(
            message="Cannot delete project with existing tasks",
            error_code="PROJECT_HAS_TASKS",
            details={
                "taskCount": task_count,
                "hint": f"This project contains {task_count} task(s). "
                "Please move or delete all tasks before deleting the project.",
            },
        )
        self.task_count = task_count
