"""Workspace service layer: workspaces and their members."""

import logging
import re
import uuid
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.domains.access.guard import Action, AuthorizationGuard
from app.domains.hierarchy.manager import is_reserved_slug
from app.domains.user.service import UserService
from app.domains.workspace.membership import EntityRef, MembershipResolver
from app.exceptions.base import NotFoundError
from app.exceptions.workspace import (
    DuplicateMemberError,
    DuplicateWorkspaceError,
    ReservedSlugError,
)
from app.schemas.workspace import MemberAdd, WorkspaceCreate
from app.shared.persistence import commit_or_raise
from models.workspace import Workspace, WorkspaceMember, WorkspaceRole

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "workspace"


class WorkspaceService:
    """Service class for workspace business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = MembershipResolver(db)
        self.guard = AuthorizationGuard(db, self.resolver)

    async def list_workspaces(self, user_id: UUID) -> List[Dict[str, Any]]:
        """The caller's workspaces, each annotated with the caller's role."""
        memberships = await self.resolver.memberships(user_id)
        return [
            self._workspace_dict(membership.workspace, membership.role)
            for membership in memberships
        ]

    async def create_workspace(self, data: WorkspaceCreate, user_id: UUID) -> Dict[str, Any]:
        """Create a workspace; the creator becomes its ADMIN."""
        slug = data.slug or slugify(data.name)
        if is_reserved_slug(slug):
            raise ReservedSlugError(slug)
        if not data.slug:
            slug = await self._available_slug(slug)
        elif await self._slug_taken(slug):
            raise DuplicateWorkspaceError()

        workspace = Workspace(
            id=uuid.uuid4(), name=data.name.strip(), slug=slug, description=data.description
        )
        self.db.add(workspace)
        self.db.add(
            WorkspaceMember(user_id=user_id, workspace_id=workspace.id, role=WorkspaceRole.ADMIN)
        )
        await commit_or_raise(self.db, "create workspace", conflict=DuplicateWorkspaceError())
        await self.db.refresh(workspace)

        logger.info("User %s created workspace %s", user_id, workspace.id)
        return self._workspace_dict(workspace, WorkspaceRole.ADMIN)

    async def list_members(self, workspace_id: UUID, user_id: UUID) -> List[WorkspaceMember]:
        await self.guard.enforce(user_id, Action.VIEW_WORKSPACE, EntityRef.workspace(workspace_id))

        stmt = (
            select(WorkspaceMember)
            .options(selectinload(WorkspaceMember.user))
            .where(WorkspaceMember.workspace_id == workspace_id)
            .order_by(WorkspaceMember.joined_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add_member(
        self, workspace_id: UUID, data: MemberAdd, user_id: UUID
    ) -> WorkspaceMember:
        """Add an existing user to the workspace. ADMIN only."""
        await self.guard.enforce(user_id, Action.MANAGE_MEMBERS, EntityRef.workspace(workspace_id))

        invitee = await UserService(self.db).get_user_by_email(str(data.email))
        if not invitee:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
        if await self.resolver.get_membership(invitee.id, workspace_id):
            raise DuplicateMemberError()

        member = WorkspaceMember(user_id=invitee.id, workspace_id=workspace_id, role=data.role)
        self.db.add(member)
        await commit_or_raise(self.db, "add workspace member", conflict=DuplicateMemberError())

        logger.info(
            "User %s added %s to workspace %s as %s",
            user_id,
            invitee.id,
            workspace_id,
            data.role.value,
        )
        stmt = (
            select(WorkspaceMember)
            .options(selectinload(WorkspaceMember.user))
            .where(WorkspaceMember.id == member.id)
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one()

    # Private helper methods

    async def _slug_taken(self, slug: str) -> bool:
        result = await self.db.execute(select(Workspace.id).where(Workspace.slug == slug))
        return result.first() is not None

    async def _available_slug(self, base: str) -> str:
        if not await self._slug_taken(base):
            return base
        return f"{base}-{uuid.uuid4().hex[:8]}"

    @staticmethod
    def _workspace_dict(workspace: Workspace, role: WorkspaceRole) -> Dict[str, Any]:
        return {
            "id": workspace.id,
            "name": workspace.name,
            "slug": workspace.slug,
            "description": workspace.description,
            "logo": workspace.logo,
            "created_at": workspace.created_at,
            "updated_at": workspace.updated_at,
            "member_role": role,
        }
