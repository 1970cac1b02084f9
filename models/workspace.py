"""
Workspace and membership models.

A workspace is the tenant container; every project, section and task
resolves to exactly one workspace. ``WorkspaceMember`` is the
(user, workspace, role) relation that every permission check reads.
"""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel, utcnow


class WorkspaceRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class Workspace(BaseModel):
    """
    Represents a named tenant container with a unique slug.
    """

    __tablename__ = "workspaces"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    logo = Column(String(500))

    # Relationships
    members = relationship(
        "WorkspaceMember", back_populates="workspace", cascade="all, delete-orphan"
    )
    projects = relationship("Project", back_populates="workspace", cascade="all, delete-orphan")


class WorkspaceMember(BaseModel):
    """
    Membership of a user in a workspace, unique per (user, workspace).
    """

    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("user_id", "workspace_id", name="uq_member_user_workspace"),)

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(
        UUID(), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(
        Enum(WorkspaceRole, name="workspace_role", native_enum=False, length=20),
        nullable=False,
        default=WorkspaceRole.MEMBER,
    )
    joined_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user = relationship("User", back_populates="memberships")
    workspace = relationship("Workspace", back_populates="members")
