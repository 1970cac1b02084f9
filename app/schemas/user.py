"""User and authentication schemas for request/response validation."""

from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from .base import BaseModelSchema, BaseSchema


class RegisterRequest(BaseSchema):
    """Schema for account registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(None, max_length=100, description="Optional display name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip() or None
        return v


class LoginRequest(BaseSchema):
    """Schema for user login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseSchema):
    """Refresh token may come in the body or the ``refresh_token`` cookie."""

    refresh_token: str | None = None


class UserSummary(BaseSchema):
    """Public view of a user embedded in other resources."""

    id: UUID
    name: str | None = None
    email: str | None = None
    avatar: str | None = None


class UserResponse(BaseModelSchema):
    """Schema for user response data."""

    email: str
    name: str | None = None
    avatar: str | None = None
    is_active: bool


class UserUpdateRequest(BaseSchema):
    """Schema for updating profile fields."""

    name: str | None = Field(None, max_length=100)
    avatar: str | None = Field(None, max_length=500)


class AuthResponse(BaseSchema):
    """Schema for login/registration response."""

    user: UserResponse
    access_token: str
    refresh_token: str


class AccessTokenResponse(BaseSchema):
    access_token: str
