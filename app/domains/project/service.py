"""Project service layer with business logic."""

import logging
import uuid
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.domains.access.guard import Action, AuthorizationGuard
from app.domains.hierarchy.manager import HierarchyManager
from app.domains.task.loaders import task_load_options
from app.domains.workspace.membership import EntityRef, MembershipResolver
from app.exceptions.project import DuplicateProjectError
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.shared.persistence import commit_or_raise
from models.project import DEFAULT_PROJECT_COLOR, Project
from models.section import Section
from models.task import Task
from models.workspace import Workspace, WorkspaceMember, WorkspaceRole

logger = logging.getLogger(__name__)

# Explicit nulls for these fields are ignored rather than applied.
NON_NULLABLE_FIELDS = ("name", "color")
UPDATABLE_FIELDS = ("name", "description", "color", "icon")


def _task_counts():
    return (
        select(Task.project_id, func.count(Task.id).label("task_count"))
        .group_by(Task.project_id)
        .subquery()
    )


def _section_counts():
    return (
        select(Section.project_id, func.count(Section.id).label("section_count"))
        .group_by(Section.project_id)
        .subquery()
    )


class ProjectService:
    """Service class for project business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = MembershipResolver(db)
        self.guard = AuthorizationGuard(db, self.resolver)
        self.hierarchy = HierarchyManager(db, self.resolver)

    async def get_projects_list(
        self, user_id: UUID, workspace_id: Optional[UUID] = None
    ) -> List[Dict[str, Any]]:
        """Projects in every workspace the user belongs to, newest first."""
        task_counts = _task_counts()
        section_counts = _section_counts()

        stmt = (
            select(
                Project,
                Workspace.name,
                WorkspaceMember.role,
                func.coalesce(task_counts.c.task_count, 0),
                func.coalesce(section_counts.c.section_count, 0),
            )
            .join(Workspace, Project.workspace_id == Workspace.id)
            .join(
                WorkspaceMember,
                and_(
                    WorkspaceMember.workspace_id == Project.workspace_id,
                    WorkspaceMember.user_id == user_id,
                ),
            )
            .outerjoin(task_counts, task_counts.c.project_id == Project.id)
            .outerjoin(section_counts, section_counts.c.project_id == Project.id)
            .order_by(desc(Project.created_at))
        )
        if workspace_id:
            stmt = stmt.where(Project.workspace_id == workspace_id)

        result = await self.db.execute(stmt)
        return [
            self._project_dict(
                project,
                workspace_name=workspace_name,
                member_role=role,
                task_count=task_count,
                section_count=section_count,
            )
            for project, workspace_name, role, task_count, section_count in result.all()
        ]

    async def get_project(self, project_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """Project with its workspace, ordered sections and unsectioned tasks."""
        decision = await self.guard.enforce(
            user_id, Action.VIEW_PROJECT, EntityRef.project(project_id)
        )
        return await self._project_detail(decision.entity, decision.role)

    async def create_project(self, project_data: ProjectCreate, user_id: UUID) -> Dict[str, Any]:
        """Create a project in a workspace where the user is ADMIN or MEMBER."""
        decision = await self.guard.enforce(
            user_id, Action.CREATE_PROJECT, EntityRef.workspace(project_data.workspace_id)
        )

        if await self._name_taken(project_data.workspace_id, project_data.name):
            raise DuplicateProjectError()

        project = Project(
            id=uuid.uuid4(),
            workspace_id=project_data.workspace_id,
            name=project_data.name,
            description=project_data.description,
            color=project_data.color or DEFAULT_PROJECT_COLOR,
            icon=project_data.icon,
        )
        self.db.add(project)
        if project_data.create_default_sections:
            self.db.add_all(self.hierarchy.canonical_sections(project.id))

        await commit_or_raise(self.db, "create project", conflict=DuplicateProjectError())
        logger.info(
            "User %s created project %s in workspace %s",
            user_id,
            project.id,
            project_data.workspace_id,
        )
        return await self._project_detail(project, decision.role)

    async def update_project(
        self, project_id: UUID, project_data: ProjectUpdate, user_id: UUID
    ) -> Dict[str, Any]:
        """Apply the supplied fields of a partial update."""
        decision = await self.guard.enforce(
            user_id, Action.UPDATE_PROJECT, EntityRef.project(project_id)
        )
        project: Project = decision.entity

        update_data = project_data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS:
            if update_data.get(field, ...) is None:
                del update_data[field]

        # Check if new name conflicts with existing project
        new_name = update_data.get("name")
        if new_name and new_name != project.name:
            if await self._name_taken(project.workspace_id, new_name):
                raise DuplicateProjectError()

        for field in UPDATABLE_FIELDS:
            if field in update_data:
                setattr(project, field, update_data[field])

        await commit_or_raise(self.db, "update project", conflict=DuplicateProjectError())
        logger.info("User %s updated project %s", user_id, project_id)
        return await self._project_detail(project, decision.role)

    async def delete_project(self, project_id: UUID, user_id: UUID) -> bool:
        """Delete an empty project and its sections. ADMIN only."""
        decision = await self.guard.enforce(
            user_id, Action.DELETE_PROJECT, EntityRef.project(project_id)
        )

        await self.db.delete(decision.entity)
        await commit_or_raise(self.db, "delete project")
        logger.info("User %s deleted project %s", user_id, project_id)
        return True

    # Private helper methods

    async def _name_taken(self, workspace_id: UUID, name: str) -> bool:
        stmt = select(Project.id).where(
            and_(Project.workspace_id == workspace_id, Project.name == name)
        )
        return (await self.db.execute(stmt)).first() is not None

    async def _project_detail(
        self, project: Project, role: Optional[WorkspaceRole]
    ) -> Dict[str, Any]:
        await self.db.refresh(project)
        workspace = await self.db.get(Workspace, project.workspace_id)

        section_stmt = (
            select(Section, func.count(Task.id))
            .outerjoin(Task, Task.section_id == Section.id)
            .where(Section.project_id == project.id)
            .group_by(Section.id)
            .order_by(Section.order, Section.created_at)
        )
        sections = [
            {
                "id": section.id,
                "project_id": section.project_id,
                "name": section.name,
                "order": section.order,
                "created_at": section.created_at,
                "updated_at": section.updated_at,
                "task_count": task_count,
            }
            for section, task_count in (await self.db.execute(section_stmt)).all()
        ]

        task_stmt = (
            select(Task)
            .options(*task_load_options())
            .where(and_(Task.project_id == project.id, Task.section_id.is_(None)))
            .order_by(Task.order, desc(Task.created_at))
        )
        backlog = list((await self.db.execute(task_stmt)).scalars().all())

        count_stmt = select(func.count(Task.id)).where(Task.project_id == project.id)
        task_count = (await self.db.execute(count_stmt)).scalar() or 0

        return {
            **self._project_dict(
                project,
                workspace_name=workspace.name,
                member_role=role,
                task_count=task_count,
                section_count=len(sections),
            ),
            "workspace": workspace,
            "sections": sections,
            "tasks": backlog,
        }

    @staticmethod
    def _project_dict(project: Project, **computed: Any) -> Dict[str, Any]:
        return {
            "id": project.id,
            "workspace_id": project.workspace_id,
            "name": project.name,
            "description": project.description,
            "color": project.color,
            "icon": project.icon,
            "created_at": project.created_at,
            "updated_at": project.updated_at,
            **computed,
        }
