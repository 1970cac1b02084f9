# app/domains/user/service.py
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.security import hash_password
from app.exceptions.auth import EmailAlreadyRegisteredError
from app.shared.persistence import commit_or_raise
from models import User


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, ignoring case."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create_user(self, email: str, password: str, name: str = None) -> User:
        """Create a new user with a bcrypt-hashed password."""
        email = email.strip().lower()
        if await self.get_user_by_email(email):
            raise EmailAlreadyRegisteredError()

        user = User(email=email, password_hash=hash_password(password), name=name)
        self.db.add(user)
        await commit_or_raise(self.db, "create user", conflict=EmailAlreadyRegisteredError())
        await self.db.refresh(user)
        return user

    async def update_profile(
        self, user_id: UUID, name: str = None, avatar: str = None
    ) -> Optional[User]:
        """Update the mutable profile fields; identity fields never change."""
        user = await self.get_user_by_id(user_id)
        if not user:
            return None

        if name is not None:
            user.name = name
        if avatar is not None:
            user.avatar = avatar

        await commit_or_raise(self.db, "update user")
        await self.db.refresh(user)
        return user
