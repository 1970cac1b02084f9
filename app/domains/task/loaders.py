"""Loader options for rendering tasks with their related entities.

Async sessions cannot lazy-load, so every query whose tasks end up in a
response must load the relations the response schema reads.
"""

from sqlalchemy.orm import selectinload

from models.comment import Comment
from models.task import Task


def task_load_options(detail: bool = False) -> list:
    options = [
        selectinload(Task.owner),
        selectinload(Task.assignee),
        selectinload(Task.project),
        selectinload(Task.section),
        selectinload(Task.subtasks),
        selectinload(Task.tags),
    ]
    if detail:
        options.extend(
            [
                selectinload(Task.comments).selectinload(Comment.user),
                selectinload(Task.attachments),
            ]
        )
    return options
