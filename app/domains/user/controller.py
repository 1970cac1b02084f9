"""User profile endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db
from app.domains.user.service import UserService
from app.schemas.user import UserResponse, UserUpdateRequest
from models.user import User

router = APIRouter(prefix="/api/users", tags=["users"])


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    update_data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the current user's display name or avatar."""
    user_service = UserService(db)
    user = await user_service.update_profile(
        current_user.id, name=update_data.name, avatar=update_data.avatar
    )
    return UserResponse.model_validate(user)
