"""Hierarchy manager: ordering within containers and default containers.

Order values are handed out as ``max(order in scope) + 1``. The read and
the write are separate statements, so two concurrent creates in one scope
can receive the same value; order is a display hint, not a key.

``ensure_default_container`` is check-then-create without a transaction
spanning both steps. The unique workspace slug and the unique
(workspace, project name) pair turn a lost race into an integrity error,
after which the winner's rows are re-read. Slugs of the default form are
reserved for this path; if one is still held by a workspace the user does
not belong to, provisioning retries once with a random suffix.
"""

import logging
import re
import uuid
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.domains.workspace.membership import MembershipResolver
from app.exceptions.base import ConflictError, InternalError
from models.project import Project
from models.section import Section
from models.subtask import Subtask
from models.task import Task
from models.workspace import Workspace, WorkspaceMember, WorkspaceRole

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "My Workspace"
DEFAULT_PROJECT_NAME = "Personal Tasks"
PERSONAL_PROJECT_COLOR = "#3B82F6"

# Sections of the auto-provisioned project, numbered from 0.
BOOTSTRAP_SECTIONS = (("To Do", 0), ("In Progress", 1), ("Done", 2))

# Sections added on request when a project is created explicitly.
CANONICAL_SECTIONS = (("To Do", 1), ("In Progress", 2), ("Review", 3), ("Done", 4))


_RESERVED_SLUG = re.compile(
    r"^workspace-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}(-[0-9a-f]{8})?$"
)


def default_workspace_slug(user_id: UUID) -> str:
    return f"workspace-{user_id}"


def is_reserved_slug(slug: str) -> bool:
    """True for slugs of the form handed out to auto-provisioned workspaces."""
    return bool(_RESERVED_SLUG.match(slug))


class HierarchyManager:
    """Maintains container ordering and bootstraps a user's first project."""

    def __init__(self, db: AsyncSession, resolver: Optional[MembershipResolver] = None):
        self.db = db
        self.resolver = resolver or MembershipResolver(db)

    async def ensure_default_container(self, user_id: UUID) -> UUID:
        """
        Return a project the user can drop a task into, creating one if needed.

        Uses the user's first workspace, or creates "My Workspace" with the
        user as ADMIN. Uses that workspace's oldest project, or creates
        "Personal Tasks" with To Do / In Progress / Done sections. Calling it
        again returns the same project.
        """
        workspace_id = await self.resolver.first_workspace_id(user_id)
        if workspace_id is None:
            workspace_id = await self._create_default_workspace(user_id)

        project_id = await self._first_project_id(workspace_id)
        if project_id is None:
            project_id = await self._create_default_project(workspace_id)
        return project_id

    async def next_section_order(self, project_id: UUID) -> int:
        stmt = select(func.max(Section.order)).where(Section.project_id == project_id)
        return await self._next(stmt)

    async def next_task_order(self, project_id: UUID, section_id: Optional[UUID]) -> int:
        """Next order within the (project, section) pair; ``None`` is the backlog."""
        section_clause = (
            Task.section_id.is_(None) if section_id is None else Task.section_id == section_id
        )
        stmt = select(func.max(Task.order)).where(
            and_(Task.project_id == project_id, section_clause)
        )
        return await self._next(stmt)

    async def next_subtask_order(self, task_id: UUID) -> int:
        stmt = select(func.max(Subtask.order)).where(Subtask.task_id == task_id)
        return await self._next(stmt)

    @staticmethod
    def canonical_sections(project_id: UUID) -> list[Section]:
        return [
            Section(project_id=project_id, name=name, order=order)
            for name, order in CANONICAL_SECTIONS
        ]

    # Private helper methods

    async def _next(self, max_stmt) -> int:
        result = await self.db.execute(max_stmt)
        current = result.scalar()
        return (current or 0) + 1

    async def _first_project_id(self, workspace_id: UUID) -> Optional[UUID]:
        stmt = (
            select(Project.id)
            .where(Project.workspace_id == workspace_id)
            .order_by(Project.created_at, Project.id)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _create_default_workspace(self, user_id: UUID) -> UUID:
        base = default_workspace_slug(user_id)
        for slug in (base, f"{base}-{uuid.uuid4().hex[:8]}"):
            workspace_id = await self._insert_default_workspace(user_id, slug)
            if workspace_id is not None:
                return workspace_id
            # Another request for the same user got there first.
            existing = await self.resolver.first_workspace_id(user_id)
            if existing is not None:
                return existing
            logger.warning("Slug %s is held by a workspace user %s is not in", slug, user_id)
        raise ConflictError("Default workspace could not be created")

    async def _insert_default_workspace(self, user_id: UUID, slug: str) -> Optional[UUID]:
        """Insert the workspace with its ADMIN membership; ``None`` if the slug is taken."""
        workspace = Workspace(name=DEFAULT_WORKSPACE_NAME, slug=slug)
        self.db.add(workspace)
        try:
            await self.db.flush()
            self.db.add(
                WorkspaceMember(
                    user_id=user_id, workspace_id=workspace.id, role=WorkspaceRole.ADMIN
                )
            )
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return None
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Failed to provision default workspace for user %s", user_id)
            raise InternalError("Failed to create default workspace") from e

        logger.info("Provisioned default workspace %s for user %s", workspace.id, user_id)
        return workspace.id

    async def _create_default_project(self, workspace_id: UUID) -> UUID:
        project = Project(
            name=DEFAULT_PROJECT_NAME, workspace_id=workspace_id, color=PERSONAL_PROJECT_COLOR
        )
        self.db.add(project)
        try:
            await self.db.flush()
            self.db.add_all(
                Section(project_id=project.id, name=name, order=order)
                for name, order in BOOTSTRAP_SECTIONS
            )
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await self._first_project_id(workspace_id)
            if existing is None:
                raise ConflictError("Default project could not be created")
            return existing
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Failed to provision default project in workspace %s", workspace_id)
            raise InternalError("Failed to create default project") from e

        logger.info("Provisioned default project %s in workspace %s", project.id, workspace_id)
        return project.id
