"""
Tag model, shared across tasks through the ``task_tags`` association table.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel
from .task import task_tags

DEFAULT_TAG_COLOR = "#6B7280"


class Tag(BaseModel):
    __tablename__ = "tags"

    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(20), nullable=False, default=DEFAULT_TAG_COLOR)

    tasks = relationship("Task", secondary=task_tags, back_populates="tags")
