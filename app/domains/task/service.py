"""Task service layer with business logic."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import and_, case, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.domains.access.guard import Action, AuthorizationGuard
from app.domains.hierarchy.manager import HierarchyManager
from app.domains.task.loaders import task_load_options
from app.domains.workspace.membership import EntityRef, MembershipResolver
from app.exceptions.base import NotFoundError
from app.exceptions.task import InvalidAssigneeError, InvalidSectionError
from app.schemas.task import (
    AttachmentCreate,
    CommentCreate,
    SubtaskCreate,
    SubtaskUpdate,
    TagCreate,
    TaskCreate,
    TaskFilter,
    TaskUpdate,
)
from app.shared.pagination import PaginationParams, paginate
from app.shared.persistence import commit_or_raise
from models.attachment import Attachment
from models.comment import Comment
from models.project import Project
from models.section import Section
from models.subtask import Subtask
from models.tag import DEFAULT_TAG_COLOR, Tag
from models.task import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

STATUS_RANK = case(
    {status: rank for rank, status in enumerate(TaskStatus)},
    value=Task.status,
    else_=len(TaskStatus),
)
# URGENT first
PRIORITY_RANK = case(
    {priority: -rank for rank, priority in enumerate(TaskPriority)},
    value=Task.priority,
    else_=1,
)

# Plain fields copied from an update payload when present.
UPDATABLE_FIELDS = ("description", "priority", "due_date", "assignee_id", "order")


class TaskService:
    """Service class for task business logic.

    Visibility and edits are limited to the task's owner and assignee;
    deletion to the owner. Every refusal surfaces as ``TaskNotFoundError``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = MembershipResolver(db)
        self.guard = AuthorizationGuard(db, self.resolver)
        self.hierarchy = HierarchyManager(db, self.resolver)

    async def get_tasks_list(
        self, user_id: UUID, filters: TaskFilter, pagination: PaginationParams
    ) -> Dict[str, Any]:
        """Get paginated list of tasks the user owns or is assigned."""

        query = select(Task).where(or_(Task.owner_id == user_id, Task.assignee_id == user_id))

        # Apply filters
        if filters.project_id:
            query = query.where(Task.project_id == filters.project_id)

        if filters.status:
            query = query.where(Task.status == filters.status)

        query = query.order_by(STATUS_RANK, PRIORITY_RANK, Task.order, desc(Task.created_at))
        # Counts are read at load time; refresh tasks already in the session.
        query = query.execution_options(populate_existing=True)

        return await paginate(self.db, query, pagination, options=task_load_options())

    async def get_task(self, task_id: UUID, user_id: UUID) -> Task:
        await self.guard.enforce(user_id, Action.VIEW_TASK, EntityRef.task(task_id))
        return await self._load_task(task_id)

    async def create_task(self, task_data: TaskCreate, user_id: UUID) -> Task:
        """Create a task owned by the requester.

        Without a project the task goes to the user's default project,
        which is provisioned on first use.
        """
        if task_data.project_id:
            decision = await self.guard.enforce(
                user_id, Action.CREATE_TASK, EntityRef.project(task_data.project_id)
            )
            project = decision.entity
        else:
            project_id = await self.hierarchy.ensure_default_container(user_id)
            project = await self.db.get(Project, project_id)

        if task_data.section_id:
            await self._validate_section(task_data.section_id, project.id)
        if task_data.assignee_id:
            await self._validate_assignee(task_data.assignee_id, project.workspace_id)

        order = await self.hierarchy.next_task_order(project.id, task_data.section_id)

        task = Task(
            title=task_data.title,
            description=task_data.description,
            project_id=project.id,
            section_id=task_data.section_id,
            owner_id=user_id,
            assignee_id=task_data.assignee_id,
            status=task_data.status,
            priority=task_data.priority,
            due_date=self._normalize_datetime(task_data.due_date),
            order=order,
        )
        self._sync_completed_at(task)

        self.db.add(task)
        await commit_or_raise(self.db, "create task")
        logger.info("User %s created task %s in project %s", user_id, task.id, project.id)
        return await self._load_task(task.id)

    async def update_task(self, task_id: UUID, task_data: TaskUpdate, user_id: UUID) -> Task:
        """Apply a partial update; owner or assignee only."""
        decision = await self.guard.enforce(user_id, Action.UPDATE_TASK, EntityRef.task(task_id))
        task: Task = decision.entity

        # Include None values to allow unsetting fields
        update_data = task_data.model_dump(exclude_unset=True, exclude_none=False)

        if "section_id" in update_data:
            section_id = update_data["section_id"]
            if section_id is not None:
                await self._validate_section(section_id, task.project_id)
            if section_id != task.section_id and update_data.get("order") is None:
                update_data["order"] = await self.hierarchy.next_task_order(
                    task.project_id, section_id
                )
            task.section_id = section_id

        if update_data.get("assignee_id") is not None:
            project = await self.db.get(Project, task.project_id)
            await self._validate_assignee(update_data["assignee_id"], project.workspace_id)

        if update_data.get("title") is not None:
            task.title = update_data["title"]
        if update_data.get("status") is not None:
            task.status = update_data["status"]

        for field in UPDATABLE_FIELDS:
            if field not in update_data:
                continue
            value = update_data[field]
            if field == "due_date":
                value = self._normalize_datetime(value)
            elif field in ("priority", "order") and value is None:
                continue
            setattr(task, field, value)

        self._sync_completed_at(task, supplied=update_data.get("completed_at"))

        await commit_or_raise(self.db, "update task")
        logger.info("User %s updated task %s", user_id, task_id)
        return await self._load_task(task_id)

    async def delete_task(self, task_id: UUID, user_id: UUID) -> bool:
        """Delete a task with its subtasks, comments and attachments; owner only."""
        decision = await self.guard.enforce(user_id, Action.DELETE_TASK, EntityRef.task(task_id))

        await self.db.delete(decision.entity)
        await commit_or_raise(self.db, "delete task")
        logger.info("User %s deleted task %s", user_id, task_id)
        return True

    async def add_subtask(self, task_id: UUID, data: SubtaskCreate, user_id: UUID) -> Subtask:
        await self.guard.enforce(user_id, Action.UPDATE_TASK, EntityRef.task(task_id))

        subtask = Subtask(
            task_id=task_id,
            title=data.title,
            order=await self.hierarchy.next_subtask_order(task_id),
        )
        self.db.add(subtask)
        await commit_or_raise(self.db, "create subtask")
        await self.db.refresh(subtask)
        return subtask

    async def update_subtask(
        self, task_id: UUID, subtask_id: UUID, data: SubtaskUpdate, user_id: UUID
    ) -> Subtask:
        await self.guard.enforce(user_id, Action.UPDATE_TASK, EntityRef.task(task_id))

        stmt = select(Subtask).where(and_(Subtask.id == subtask_id, Subtask.task_id == task_id))
        subtask = (await self.db.execute(stmt)).scalar_one_or_none()
        if not subtask:
            raise NotFoundError("Subtask not found", error_code="SUBTASK_NOT_FOUND")

        if data.title is not None:
            subtask.title = data.title
        if data.completed is not None:
            subtask.completed = data.completed

        await commit_or_raise(self.db, "update subtask")
        await self.db.refresh(subtask)
        return subtask

    async def add_comment(self, task_id: UUID, data: CommentCreate, user_id: UUID) -> Comment:
        await self.guard.enforce(user_id, Action.VIEW_TASK, EntityRef.task(task_id))

        comment = Comment(task_id=task_id, user_id=user_id, content=data.content)
        self.db.add(comment)
        await commit_or_raise(self.db, "create comment")

        stmt = (
            select(Comment)
            .options(selectinload(Comment.user))
            .where(Comment.id == comment.id)
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def add_attachment(
        self, task_id: UUID, data: AttachmentCreate, user_id: UUID
    ) -> Attachment:
        """Record attachment metadata; the file itself is stored elsewhere."""
        await self.guard.enforce(user_id, Action.UPDATE_TASK, EntityRef.task(task_id))

        attachment = Attachment(
            task_id=task_id,
            name=data.name,
            url=data.url,
            size=data.size,
            mime_type=data.mime_type,
        )
        self.db.add(attachment)
        await commit_or_raise(self.db, "create attachment")
        await self.db.refresh(attachment)
        return attachment

    async def add_tag(self, task_id: UUID, data: TagCreate, user_id: UUID) -> Tag:
        """Attach a tag by name, creating it on first use. Attaching twice is a no-op."""
        await self.guard.enforce(user_id, Action.UPDATE_TASK, EntityRef.task(task_id))

        name = data.name.strip()
        tag = (await self.db.execute(select(Tag).where(Tag.name == name))).scalar_one_or_none()
        if tag is None:
            tag = Tag(name=name, color=data.color or DEFAULT_TAG_COLOR)
            self.db.add(tag)

        stmt = (
            select(Task)
            .options(selectinload(Task.tags))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        task = (await self.db.execute(stmt)).scalar_one()
        if tag not in task.tags:
            task.tags.append(tag)

        await commit_or_raise(self.db, "tag task")
        await self.db.refresh(tag)
        return tag

    # Private helper methods

    async def _load_task(self, task_id: UUID) -> Task:
        stmt = (
            select(Task)
            .options(*task_load_options(detail=True))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def _validate_section(self, section_id: UUID, project_id: UUID) -> None:
        stmt = select(Section.id).where(
            and_(Section.id == section_id, Section.project_id == project_id)
        )
        if (await self.db.execute(stmt)).first() is None:
            raise InvalidSectionError()

    async def _validate_assignee(self, assignee_id: UUID, workspace_id: UUID) -> None:
        if await self.resolver.get_membership(assignee_id, workspace_id) is None:
            raise InvalidAssigneeError()

    @classmethod
    def _sync_completed_at(cls, task: Task, supplied: Optional[datetime] = None) -> None:
        """Keep ``completed_at`` set exactly when the task is COMPLETED."""
        if task.status != TaskStatus.COMPLETED:
            task.completed_at = None
        elif supplied is not None:
            task.completed_at = cls._normalize_datetime(supplied)
        elif task.completed_at is None:
            task.completed_at = datetime.now(timezone.utc)

    @staticmethod
    def _normalize_datetime(dt: Optional[datetime]) -> Optional[datetime]:
        """Normalize datetime to UTC timezone-aware format."""
        if dt is None:
            return None

        # If datetime is timezone-naive, assume it's UTC
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)

        # If datetime is timezone-aware, convert to UTC
        return dt.astimezone(timezone.utc)
