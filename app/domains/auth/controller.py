"""Authentication endpoints: register, login, refresh, logout."""

import logging

from fastapi import APIRouter, Body, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_user,
    get_db,
)
from app.domains.auth.service import AuthService, LoginResult
from app.schemas.base import SuccessResponse
from app.schemas.user import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    UserResponse,
)
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def set_access_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=settings.access_token_max_age,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def set_auth_cookies(response: Response, result: LoginResult) -> None:
    set_access_cookie(response, result.access_token)
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        result.refresh_token,
        max_age=settings.refresh_token_max_age,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def _auth_response(result: LoginResult) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(result.user),
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Create an account and start a session for it."""
    result = await AuthService(db).register(register_data)
    set_auth_cookies(response, result)
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate with email and password.

    Returns both tokens in the body and sets them as httpOnly cookies.
    """
    result = await AuthService(db).login(str(login_data.email), login_data.password)
    set_auth_cookies(response, result)
    return _auth_response(result)


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(
    request: Request,
    response: Response,
    refresh_data: RefreshRequest | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """Exchange a live refresh token for a new access token."""
    token = (refresh_data.refresh_token if refresh_data else None) or request.cookies.get(
        REFRESH_TOKEN_COOKIE
    )
    access_token = await AuthService(db).refresh_access_token(token)
    set_access_cookie(response, access_token)
    return AccessTokenResponse(access_token=access_token)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    response: Response,
    refresh_data: RefreshRequest | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the session and clear the auth cookies."""
    token = (refresh_data.refresh_token if refresh_data else None) or request.cookies.get(
        REFRESH_TOKEN_COOKIE
    )
    await AuthService(db).logout(token)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return SuccessResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return UserResponse.model_validate(current_user)
