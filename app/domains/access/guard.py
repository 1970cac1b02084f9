"""Authorization guard: the single policy point for every mutation.

``authorize`` answers "may this principal perform this action on this
entity" and explains a refusal; ``enforce`` turns a refusal into the
exception the HTTP layer reports.

Role policy (membership in the entity's workspace):

==================  ==================  ======================
Action              Target              Roles
==================  ==================  ======================
view workspace      workspace           ADMIN, MEMBER, VIEWER
manage members      workspace           ADMIN
create project      workspace           ADMIN, MEMBER
view project        project             ADMIN, MEMBER, VIEWER
update project      project             ADMIN, MEMBER
delete project      project             ADMIN, and no tasks left
view section        section / project   ADMIN, MEMBER, VIEWER
create section      project             ADMIN, MEMBER
create task         project             ADMIN, MEMBER, VIEWER
==================  ==================  ======================

Task policy (ownership, independent of workspace role):

============  =================
view task     owner or assignee
update task   owner or assignee
delete task   owner
============  =================

Denials on a project, section or task are reported as not-found so callers
cannot probe for entities they cannot see. Only the workspace-level
collection actions (creating a project, managing members) report 403.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.domains.workspace.membership import EntityKind, EntityRef, MembershipResolver
from app.exceptions.base import BaseAppException, NotFoundError
from app.exceptions.project import ProjectHasTasksError, ProjectNotFoundError
from app.exceptions.task import TaskNotFoundError
from app.exceptions.workspace import (
    InsufficientRoleError,
    WorkspaceAccessDeniedError,
    WorkspaceNotFoundError,
)
from models.task import Task
from models.workspace import WorkspaceRole

logger = logging.getLogger(__name__)


class Action(str, Enum):
    VIEW_WORKSPACE = "workspace:view"
    MANAGE_MEMBERS = "workspace:manage_members"
    CREATE_PROJECT = "project:create"
    VIEW_PROJECT = "project:view"
    UPDATE_PROJECT = "project:update"
    DELETE_PROJECT = "project:delete"
    VIEW_SECTION = "section:view"
    CREATE_SECTION = "section:create"
    CREATE_TASK = "task:create"
    VIEW_TASK = "task:view"
    UPDATE_TASK = "task:update"
    DELETE_TASK = "task:delete"


class DenyReason(str, Enum):
    NOT_FOUND = "not_found"
    NO_MEMBERSHIP = "no_membership"
    INSUFFICIENT_ROLE = "insufficient_role"
    NOT_OWNER = "not_owner"
    HAS_TASKS = "has_tasks"


ANY_ROLE = frozenset(WorkspaceRole)
EDITORS = frozenset({WorkspaceRole.ADMIN, WorkspaceRole.MEMBER})
ADMINS = frozenset({WorkspaceRole.ADMIN})

ROLE_POLICY: dict[Action, frozenset[WorkspaceRole]] = {
    Action.VIEW_WORKSPACE: ANY_ROLE,
    Action.MANAGE_MEMBERS: ADMINS,
    Action.CREATE_PROJECT: EDITORS,
    Action.VIEW_PROJECT: ANY_ROLE,
    Action.UPDATE_PROJECT: EDITORS,
    Action.DELETE_PROJECT: ADMINS,
    Action.VIEW_SECTION: ANY_ROLE,
    Action.CREATE_SECTION: EDITORS,
    Action.CREATE_TASK: ANY_ROLE,
}

# Task actions: whether the assignee shares the owner's right.
OWNERSHIP_POLICY: dict[Action, bool] = {
    Action.VIEW_TASK: True,
    Action.UPDATE_TASK: True,
    Action.DELETE_TASK: False,
}

TARGET_KINDS: dict[Action, frozenset[EntityKind]] = {
    Action.VIEW_WORKSPACE: frozenset({EntityKind.WORKSPACE}),
    Action.MANAGE_MEMBERS: frozenset({EntityKind.WORKSPACE}),
    Action.CREATE_PROJECT: frozenset({EntityKind.WORKSPACE}),
    Action.VIEW_PROJECT: frozenset({EntityKind.PROJECT}),
    Action.UPDATE_PROJECT: frozenset({EntityKind.PROJECT}),
    Action.DELETE_PROJECT: frozenset({EntityKind.PROJECT}),
    Action.VIEW_SECTION: frozenset({EntityKind.SECTION, EntityKind.PROJECT}),
    Action.CREATE_SECTION: frozenset({EntityKind.PROJECT}),
    Action.CREATE_TASK: frozenset({EntityKind.PROJECT}),
    Action.VIEW_TASK: frozenset({EntityKind.TASK}),
    Action.UPDATE_TASK: frozenset({EntityKind.TASK}),
    Action.DELETE_TASK: frozenset({EntityKind.TASK}),
}

# Collection-level actions that report 403 instead of hiding behind 404.
WORKSPACE_COLLECTION_ACTIONS = frozenset({Action.CREATE_PROJECT, Action.MANAGE_MEMBERS})


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check.

    ``entity`` is the loaded target when the check had to read it, so
    callers do not fetch it a second time.
    """

    allowed: bool
    reason: Optional[DenyReason] = None
    role: Optional[WorkspaceRole] = None
    entity: Any = None
    details: dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls, entity: Any = None, role: Optional[WorkspaceRole] = None) -> "Decision":
        return cls(True, role=role, entity=entity)

    @classmethod
    def deny(cls, reason: DenyReason, **kwargs) -> "Decision":
        return cls(False, reason=reason, **kwargs)


class AuthorizationGuard:
    """Evaluates the policy tables against the persisted memberships."""

    def __init__(self, db: AsyncSession, resolver: Optional[MembershipResolver] = None):
        self.db = db
        self.resolver = resolver or MembershipResolver(db)

    async def authorize(self, user_id: UUID, action: Action, ref: EntityRef) -> Decision:
        if ref.kind not in TARGET_KINDS[action]:
            raise ValueError(f"{action.value} cannot target a {ref.kind.value}")

        if action in OWNERSHIP_POLICY:
            decision = await self._authorize_ownership(user_id, action, ref)
        else:
            decision = await self._authorize_role(user_id, action, ref)

        if not decision.allowed:
            logger.debug(
                "Denied %s on %s %s for user %s: %s",
                action.value,
                ref.kind.value,
                ref.id,
                user_id,
                decision.reason.value,
            )
        return decision

    async def enforce(self, user_id: UUID, action: Action, ref: EntityRef) -> Decision:
        """Authorize or raise the exception that reports the refusal."""
        decision = await self.authorize(user_id, action, ref)
        if not decision.allowed:
            raise self._to_exception(action, ref, decision)
        return decision

    async def _authorize_ownership(
        self, user_id: UUID, action: Action, ref: EntityRef
    ) -> Decision:
        task = await self.db.get(Task, ref.id)
        if task is None:
            return Decision.deny(DenyReason.NOT_FOUND)
        if task.owner_id == user_id:
            return Decision.allow(entity=task)
        if OWNERSHIP_POLICY[action] and task.assignee_id == user_id:
            return Decision.allow(entity=task)
        return Decision.deny(DenyReason.NOT_OWNER)

    async def _authorize_role(self, user_id: UUID, action: Action, ref: EntityRef) -> Decision:
        resolved = await self.resolver.resolve(ref)
        if resolved is None:
            return Decision.deny(DenyReason.NOT_FOUND)

        role = await self.resolver.role_of(user_id, resolved.workspace_id)
        if role is None:
            return Decision.deny(DenyReason.NO_MEMBERSHIP)
        if role not in ROLE_POLICY[action]:
            return Decision.deny(DenyReason.INSUFFICIENT_ROLE, role=role)

        if action is Action.DELETE_PROJECT:
            task_count = await self._count_tasks(ref.id)
            if task_count > 0:
                return Decision.deny(
                    DenyReason.HAS_TASKS,
                    role=role,
                    entity=resolved.entity,
                    details={"task_count": task_count},
                )

        return Decision.allow(entity=resolved.entity, role=role)

    async def _count_tasks(self, project_id: UUID) -> int:
        stmt = select(func.count(Task.id)).where(Task.project_id == project_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    @staticmethod
    def _to_exception(action: Action, ref: EntityRef, decision: Decision) -> BaseAppException:
        if decision.reason is DenyReason.HAS_TASKS:
            return ProjectHasTasksError(decision.details["task_count"])

        if action in WORKSPACE_COLLECTION_ACTIONS:
            if decision.reason is DenyReason.INSUFFICIENT_ROLE:
                if action is Action.CREATE_PROJECT:
                    return InsufficientRoleError("You do not have permission to create projects")
                return InsufficientRoleError("Only workspace admins can manage members")
            if action is Action.CREATE_PROJECT:
                return WorkspaceAccessDeniedError()
            return WorkspaceNotFoundError()

        if ref.kind is EntityKind.TASK:
            return TaskNotFoundError()
        if ref.kind is EntityKind.WORKSPACE:
            return WorkspaceNotFoundError()
        if ref.kind is EntityKind.SECTION:
            return NotFoundError("Section not found or access denied", error_code="SECTION_NOT_FOUND")
        return ProjectNotFoundError()
