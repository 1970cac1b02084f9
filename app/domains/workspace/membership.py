"""Membership resolution: who holds which role in which workspace.

Requests name their target by entity id (a project, a section, a task),
never by workspace id, so every permission check first walks the entity up
to its owning workspace and then reads the caller's ``WorkspaceMember`` row
there. No row means no access.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from models.project import Project
from models.section import Section
from models.task import Task
from models.workspace import Workspace, WorkspaceMember, WorkspaceRole


class EntityKind(str, Enum):
    WORKSPACE = "workspace"
    PROJECT = "project"
    SECTION = "section"
    TASK = "task"


@dataclass(frozen=True)
class EntityRef:
    """Reference to the entity a request targets."""

    kind: EntityKind
    id: UUID

    @classmethod
    def workspace(cls, entity_id: UUID) -> "EntityRef":
        return cls(EntityKind.WORKSPACE, entity_id)

    @classmethod
    def project(cls, entity_id: UUID) -> "EntityRef":
        return cls(EntityKind.PROJECT, entity_id)

    @classmethod
    def section(cls, entity_id: UUID) -> "EntityRef":
        return cls(EntityKind.SECTION, entity_id)

    @classmethod
    def task(cls, entity_id: UUID) -> "EntityRef":
        return cls(EntityKind.TASK, entity_id)


@dataclass(frozen=True)
class ResolvedEntity:
    entity: Any
    workspace_id: UUID


class MembershipResolver:
    """Looks up workspace roles for a user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def role_of(self, user_id: UUID, workspace_id: UUID) -> Optional[WorkspaceRole]:
        """Single lookup by the (user, workspace) composite key."""
        membership = await self.get_membership(user_id, workspace_id)
        return membership.role if membership else None

    async def get_membership(
        self, user_id: UUID, workspace_id: UUID
    ) -> Optional[WorkspaceMember]:
        stmt = select(WorkspaceMember).where(
            and_(
                WorkspaceMember.user_id == user_id,
                WorkspaceMember.workspace_id == workspace_id,
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def resolve(self, ref: EntityRef) -> Optional[ResolvedEntity]:
        """Load the referenced entity together with its owning workspace id."""
        if ref.kind is EntityKind.WORKSPACE:
            workspace = await self.db.get(Workspace, ref.id)
            return ResolvedEntity(workspace, workspace.id) if workspace else None

        if ref.kind is EntityKind.PROJECT:
            project = await self.db.get(Project, ref.id)
            return ResolvedEntity(project, project.workspace_id) if project else None

        if ref.kind is EntityKind.SECTION:
            stmt = (
                select(Section, Project.workspace_id)
                .join(Project, Section.project_id == Project.id)
                .where(Section.id == ref.id)
            )
        else:
            stmt = (
                select(Task, Project.workspace_id)
                .join(Project, Task.project_id == Project.id)
                .where(Task.id == ref.id)
            )
        row = (await self.db.execute(stmt)).first()
        return ResolvedEntity(row[0], row[1]) if row else None

    async def role_for_entity(self, user_id: UUID, ref: EntityRef) -> Optional[WorkspaceRole]:
        """Resolve the entity to its workspace, then delegate to ``role_of``."""
        resolved = await self.resolve(ref)
        if resolved is None:
            return None
        return await self.role_of(user_id, resolved.workspace_id)

    async def memberships(self, user_id: UUID) -> list[WorkspaceMember]:
        """All of a user's memberships with their workspaces, oldest first."""
        stmt = (
            select(WorkspaceMember)
            .options(selectinload(WorkspaceMember.workspace))
            .where(WorkspaceMember.user_id == user_id)
            .order_by(WorkspaceMember.joined_at, WorkspaceMember.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def first_workspace_id(self, user_id: UUID) -> Optional[UUID]:
        """The workspace a user lands in by default.

        Workspaces where the user can create content win over ones where they
        only view; ties go to the earliest membership.
        """
        stmt = (
            select(WorkspaceMember.workspace_id)
            .where(WorkspaceMember.user_id == user_id)
            .order_by(
                case((WorkspaceMember.role == WorkspaceRole.VIEWER, 1), else_=0),
                WorkspaceMember.joined_at,
                WorkspaceMember.id,
            )
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
