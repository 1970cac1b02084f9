"""
Section model: an ordered bucket of a project's tasks (a board column).
"""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Section(BaseModel):
    __tablename__ = "sections"

    project_id = Column(UUID(), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    # Display sequence within the project; not unique, never re-compacted.
    order = Column(Integer, nullable=False, default=0)

    # Relationships
    project = relationship("Project", back_populates="sections")
    tasks = relationship("Task", back_populates="section", order_by="Task.order")
