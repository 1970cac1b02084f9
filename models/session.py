"""
Refresh-token session model.

One row is written per successful login. A session is active while its row
exists and ``expires_at`` lies in the future; logout deletes the row.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class UserSession(BaseModel):
    __tablename__ = "sessions"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    refresh_token = Column(String(1024), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="sessions")
