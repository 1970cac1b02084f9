"""
Models package initialization.
"""

from .attachment import Attachment
from .base import Base, BaseModel
from .comment import Comment
from .project import Project
from .section import Section
from .session import UserSession
from .subtask import Subtask
from .tag import Tag
from .task import Task, TaskPriority, TaskStatus, task_tags
from .user import User
from .workspace import Workspace, WorkspaceMember, WorkspaceRole

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserSession",
    "Workspace",
    "WorkspaceMember",
    "WorkspaceRole",
    "Project",
    "Section",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "task_tags",
    "Subtask",
    "Comment",
    "Attachment",
    "Tag",
]
