"""Project schemas for request/response serialization."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from models.workspace import WorkspaceRole

from .base import BaseModelSchema, BaseSchema
from .section import SectionResponse
from .task import TaskResponse
from .workspace import WorkspaceSummary


def _clean_name(v: str | None) -> str | None:
    if v is not None:
        v = v.strip()
        if not v:
            raise ValueError("Project name cannot be empty or only whitespace")
    return v


class ProjectCreate(BaseSchema):
    """Schema for creating a new project."""

    name: str = Field(..., min_length=1, max_length=255)
    workspace_id: UUID
    description: str | None = None
    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=100)
    create_default_sections: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate and clean the project name."""
        return _clean_name(v)


class ProjectUpdate(BaseSchema):
    """Schema for updating a project.

    Only fields present in the payload are applied. ``description`` and
    ``icon`` may be sent as ``null`` to clear them; ``null`` for ``name`` or
    ``color`` is ignored.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        """Validate and clean the project name."""
        return _clean_name(v)


class ProjectResponse(BaseModelSchema):
    """Schema for project response."""

    workspace_id: UUID
    name: str
    description: str | None = None
    color: str
    icon: str | None = None

    # Computed fields
    workspace_name: str | None = None
    member_role: WorkspaceRole | None = None
    task_count: int | None = None
    section_count: int | None = None


class ProjectDetail(ProjectResponse):
    """Project with its ordered sections and unsectioned tasks."""

    workspace: WorkspaceSummary | None = None
    sections: list[SectionResponse] = []
    tasks: list[TaskResponse] = []


class ProjectListResponse(BaseSchema):
    """Schema for project list response."""

    success: bool = True
    projects: list[ProjectResponse]
    total: int


class ProjectEnvelope(BaseSchema):
    success: bool = True
    message: str | None = None
    project: ProjectDetail
