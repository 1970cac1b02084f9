"""Section service layer: a project's ordered task buckets."""

import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.domains.access.guard import Action, AuthorizationGuard
from app.domains.hierarchy.manager import HierarchyManager
from app.domains.task.loaders import task_load_options
from app.domains.workspace.membership import EntityRef, MembershipResolver
from app.schemas.section import SectionCreate
from app.shared.persistence import commit_or_raise
from models.section import Section

logger = logging.getLogger(__name__)


class SectionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = MembershipResolver(db)
        self.guard = AuthorizationGuard(db, self.resolver)
        self.hierarchy = HierarchyManager(db, self.resolver)

    async def list_sections(self, project_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        """Sections ordered by ``order``, each with its tasks in order."""
        await self.guard.enforce(user_id, Action.VIEW_SECTION, EntityRef.project(project_id))

        stmt = (
            select(Section)
            .options(selectinload(Section.tasks).options(*task_load_options()))
            .where(Section.project_id == project_id)
            .order_by(Section.order, Section.created_at)
        )
        sections = (await self.db.execute(stmt)).scalars().all()
        return [self._section_dict(section, tasks=list(section.tasks)) for section in sections]

    async def create_section(
        self, project_id: UUID, data: SectionCreate, user_id: UUID
    ) -> Dict[str, Any]:
        """Append a section to the project unless an order is given."""
        await self.guard.enforce(user_id, Action.CREATE_SECTION, EntityRef.project(project_id))

        order = data.order
        if order is None:
            order = await self.hierarchy.next_section_order(project_id)

        section = Section(project_id=project_id, name=data.name, order=order)
        self.db.add(section)
        await commit_or_raise(self.db, "create section")
        await self.db.refresh(section)

        logger.info("User %s created section %s in project %s", user_id, section.id, project_id)
        return self._section_dict(section, tasks=[])

    @staticmethod
    def _section_dict(section: Section, tasks: list) -> Dict[str, Any]:
        return {
            "id": section.id,
            "project_id": section.project_id,
            "name": section.name,
            "order": section.order,
            "created_at": section.created_at,
            "updated_at": section.updated_at,
            "task_count": len(tasks),
            "tasks": tasks,
        }
