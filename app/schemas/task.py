"""Task schemas for request/response serialization."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from uuid import UUID

from pydantic import Field, field_validator

from models.task import TaskPriority, TaskStatus

from .base import BaseModelSchema, BaseSchema
from .user import UserSummary


def _parse_due_date(value):
    """Accept a bare ``YYYY-MM-DD`` as midnight UTC; leave anything else to pydantic."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if len(value) == 10:
            try:
                return datetime.combine(date.fromisoformat(value), time.min, tzinfo=timezone.utc)
            except ValueError:
                return value
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskCreate(BaseSchema):
    """Schema for creating a new task."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    project_id: UUID | None = None
    section_id: UUID | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    assignee_id: UUID | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        return _parse_due_date(v)

    @field_validator("assignee_id", "project_id", "section_id", mode="before")
    @classmethod
    def blank_ids_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class TaskUpdate(BaseSchema):
    """Schema for updating a task.

    Fields left out of the payload are untouched; fields sent as ``null``
    are cleared (``due_date``, ``assignee_id``, ``section_id``,
    ``completed_at``, ``description``).
    """

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assignee_id: UUID | None = None
    completed_at: datetime | None = None
    section_id: UUID | None = None
    order: int | None = Field(None, ge=0)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        return _parse_due_date(v)

    @field_validator("assignee_id", "section_id", mode="before")
    @classmethod
    def blank_ids_to_none(cls, v):
        return _blank_to_none(v)


class ProjectRef(BaseSchema):
    id: UUID
    name: str
    color: str | None = None


class SectionRef(BaseSchema):
    id: UUID
    name: str


class SubtaskCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=500)


class SubtaskUpdate(BaseSchema):
    title: str | None = Field(None, min_length=1, max_length=500)
    completed: bool | None = None


class SubtaskResponse(BaseModelSchema):
    task_id: UUID
    title: str
    completed: bool
    order: int


class CommentCreate(BaseSchema):
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModelSchema):
    task_id: UUID
    user_id: UUID
    content: str
    user: UserSummary | None = None


class AttachmentCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=1000)
    size: int = Field(default=0, ge=0)
    mime_type: str = Field(..., min_length=1, max_length=100)


class AttachmentResponse(BaseModelSchema):
    task_id: UUID
    name: str
    url: str
    size: int
    mime_type: str


class TagCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    color: str | None = Field(None, max_length=20)


class TagResponse(BaseSchema):
    id: UUID
    name: str
    color: str


class TaskResponse(BaseModelSchema):
    """Schema for task response."""

    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None = None
    completed_at: datetime | None = None
    order: int
    project_id: UUID
    section_id: UUID | None = None
    owner_id: UUID
    assignee_id: UUID | None = None

    owner: UserSummary | None = None
    assignee: UserSummary | None = None
    project: ProjectRef | None = None
    section: SectionRef | None = None
    subtasks: list[SubtaskResponse] = []
    tags: list[TagResponse] = []
    comment_count: int = 0
    subtask_count: int = 0


class TaskDetail(TaskResponse):
    """Task with its discussion and attachments."""

    comments: list[CommentResponse] = []
    attachments: list[AttachmentResponse] = []


class TaskEnvelope(BaseSchema):
    success: bool = True
    message: str | None = None
    task: TaskDetail


class TaskListResponse(BaseSchema):
    """Schema for task list response."""

    success: bool = True
    tasks: list[TaskResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class SubtaskEnvelope(BaseSchema):
    success: bool = True
    subtask: SubtaskResponse


class CommentEnvelope(BaseSchema):
    success: bool = True
    comment: CommentResponse


class AttachmentEnvelope(BaseSchema):
    success: bool = True
    attachment: AttachmentResponse


class TagEnvelope(BaseSchema):
    success: bool = True
    tag: TagResponse


class TaskFilter(BaseSchema):
    """Schema for filtering tasks."""

    project_id: UUID | None = None
    status: TaskStatus | None = None
