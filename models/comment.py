"""
Comment model for task discussions.
"""

from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Comment(BaseModel):
    __tablename__ = "comments"

    task_id = Column(UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)

    task = relationship("Task", back_populates="comments")
    user = relationship("User", back_populates="comments")
