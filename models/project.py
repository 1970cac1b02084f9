"""
Project model for organizing tasks inside a workspace.
"""

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel

DEFAULT_PROJECT_COLOR = "#0066FF"


class Project(BaseModel):
    """
    Represents a project entity in the application.

    Deleting a project removes its sections; a project that still owns
    tasks cannot be deleted, so ``tasks`` carries no delete cascade.
    """

    __tablename__ = "projects"
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", name="uq_project_workspace_name"),
    )

    workspace_id = Column(
        UUID(), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(255), nullable=False)
    description = Column(Text)
    color = Column(String(20), nullable=False, default=DEFAULT_PROJECT_COLOR)
    icon = Column(String(100))

    # Relationships
    workspace = relationship("Workspace", back_populates="projects")
    sections = relationship(
        "Section",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Section.order",
    )
    tasks = relationship("Task", back_populates="project")
