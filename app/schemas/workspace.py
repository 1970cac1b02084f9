"""Workspace and membership schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from models.workspace import WorkspaceRole

from .base import BaseModelSchema, BaseSchema
from .user import UserSummary


class WorkspaceCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str | None = None


class WorkspaceSummary(BaseSchema):
    id: UUID
    name: str
    slug: str


class WorkspaceResponse(BaseModelSchema):
    name: str
    slug: str
    description: str | None = None
    logo: str | None = None
    member_role: WorkspaceRole | None = None


class WorkspaceListResponse(BaseSchema):
    success: bool = True
    workspaces: list[WorkspaceResponse]
    total: int


class WorkspaceEnvelope(BaseSchema):
    success: bool = True
    message: str | None = None
    workspace: WorkspaceResponse


class MemberAdd(BaseSchema):
    email: EmailStr
    role: WorkspaceRole = WorkspaceRole.MEMBER


class MemberResponse(BaseSchema):
    id: UUID
    user_id: UUID
    workspace_id: UUID
    role: WorkspaceRole
    joined_at: datetime | None = None
    user: UserSummary | None = None


class MemberListResponse(BaseSchema):
    success: bool = True
    members: list[MemberResponse]
    total: int


class MemberEnvelope(BaseSchema):
    success: bool = True
    message: str | None = None
    member: MemberResponse
