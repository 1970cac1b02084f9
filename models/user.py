"""
Provides the User model for the application's database schema.

A user is an identity with a unique email and a bcrypt password hash. The
identity is immutable after registration; only the profile fields (``name``
and ``avatar``) change afterwards.

Relationships
-------------
memberships : sqlalchemy.orm.relationship
    Workspace memberships, each carrying the user's role in that workspace.
owned_tasks / assigned_tasks : sqlalchemy.orm.relationship
    Tasks the user created and tasks assigned to the user.
sessions : sqlalchemy.orm.relationship
    Refresh-token sessions recorded at login.
"""

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a user entity in the application.

    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar password_hash: bcrypt hash of the user's password.
    :type password_hash: str
    :ivar name: Optional display name.
    :type name: str
    :ivar avatar: Optional avatar URL.
    :type avatar: str
    :ivar is_active: Indicates whether the user account is active.
    :type is_active: bool
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100))
    avatar = Column(String(500))
    is_active = Column(Boolean, default=True)

    # Relationships
    memberships = relationship(
        "WorkspaceMember", back_populates="user", cascade="all, delete-orphan"
    )
    owned_tasks = relationship("Task", back_populates="owner", foreign_keys="Task.owner_id")
    assigned_tasks = relationship(
        "Task", back_populates="assignee", foreign_keys="Task.assignee_id"
    )
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="user")
