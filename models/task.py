"""
A module defining the ``Task`` ORM model and its status/priority enums.

A task belongs to a project and optionally to one of that project's
sections (``section_id`` of ``None`` is the unsectioned backlog). It has an
owner (its creator) and an optional assignee; those two users are the only
principals that can see or edit it, and only the owner can delete it.

``completed_at`` is non-null exactly when ``status`` is ``COMPLETED``. The
schema does not enforce this; the task service does on every write.
"""

import enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
    select,
)
from sqlalchemy.orm import column_property, relationship

from .base import UUID, Base, BaseModel
from .comment import Comment
from .subtask import Subtask


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


task_tags = Table(
    "task_tags",
    Base.metadata,
    Column("task_id", UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", UUID(), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Task(BaseModel):
    __tablename__ = "tasks"

    project_id = Column(UUID(), ForeignKey("projects.id"), nullable=False)
    section_id = Column(UUID(), ForeignKey("sections.id", ondelete="SET NULL"))
    owner_id = Column(UUID(), ForeignKey("users.id"), nullable=False)
    assignee_id = Column(UUID(), ForeignKey("users.id", ondelete="SET NULL"))

    title = Column(String(500), nullable=False)
    description = Column(Text)
    status = Column(
        Enum(TaskStatus, name="task_status", native_enum=False, length=20),
        nullable=False,
        default=TaskStatus.TODO,
    )
    priority = Column(
        Enum(TaskPriority, name="task_priority", native_enum=False, length=20),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    due_date = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    # Scoped per (project_id, section_id); best-effort, not unique.
    order = Column(Integer, nullable=False, default=0)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    section = relationship("Section", back_populates="tasks")
    owner = relationship("User", back_populates="owned_tasks", foreign_keys=[owner_id])
    assignee = relationship("User", back_populates="assigned_tasks", foreign_keys=[assignee_id])
    subtasks = relationship(
        "Subtask", back_populates="task", cascade="all, delete-orphan", order_by="Subtask.order"
    )
    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Comment.created_at.desc()",
    )
    attachments = relationship("Attachment", back_populates="task", cascade="all, delete-orphan")
    tags = relationship("Tag", secondary=task_tags, back_populates="tasks")


Task.comment_count = column_property(
    select(func.count(Comment.id))
    .where(Comment.task_id == Task.id)
    .correlate_except(Comment)
    .scalar_subquery()
)
Task.subtask_count = column_property(
    select(func.count(Subtask.id))
    .where(Subtask.task_id == Task.id)
    .correlate_except(Subtask)
    .scalar_subquery()
)
