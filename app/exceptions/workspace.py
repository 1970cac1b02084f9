"""Workspace-related exceptions."""

from .base import AppPermissionError, ConflictError, NotFoundError, ValidationError


class WorkspaceNotFoundError(NotFoundError):
    """Raised when a workspace is absent or the caller is not a member."""

    def __init__(self, message: str = "Workspace not found or access denied"):
        super().__init__(message=message, error_code="WORKSPACE_NOT_FOUND")


class WorkspaceAccessDeniedError(AppPermissionError):
    """Raised when the caller has no membership in the target workspace."""

    def __init__(self, message: str = "You do not have access to this workspace"):
        super().__init__(message=message, error_code="WORKSPACE_ACCESS_DENIED")


class InsufficientRoleError(AppPermissionError):
    """Raised when the caller is a member but their role is too low."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message=message, error_code="INSUFFICIENT_ROLE")


class DuplicateWorkspaceError(ConflictError):
    """Raised when a workspace slug is already taken."""

    def __init__(self, message: str = "A workspace with this slug already exists"):
        super().__init__(message=message, error_code="DUPLICATE_WORKSPACE")


class DuplicateMemberError(ConflictError):
    """Raised when a user is already a member of the workspace."""

    def __init__(self, message: str = "User is already a member of this workspace"):
        super().__init__(message=message, error_code="DUPLICATE_MEMBER")


class ReservedSlugError(ValidationError):
    """Raised when a slug has the form kept for auto-provisioned workspaces."""

    def __init__(self, slug: str):
        super().__init__(message="This workspace slug is reserved", details={"slug": slug})
