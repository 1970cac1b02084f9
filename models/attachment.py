"""
Attachment model.

Only metadata is stored; the file itself lives wherever ``url`` points.
"""

from sqlalchemy import BigInteger, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Attachment(BaseModel):
    __tablename__ = "attachments"

    task_id = Column(UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    url = Column(String(1000), nullable=False)
    size = Column(BigInteger, nullable=False, default=0)
    mime_type = Column(String(100), nullable=False)

    task = relationship("Task", back_populates="attachments")
