"""
Authentication endpoints.

    POST   /api/auth/register   create account, start session
    POST   /api/auth/login      verify credentials, start session
    GET    /api/auth/me         current user (session required)
    DELETE /api/auth/logout     clear session (idempotent)
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.database import get_db
from bistro.dependencies import get_session_cookie, require_user_id
from bistro.schemas import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserProfile,
)
from bistro.services import auth as auth_service
from bistro.services.session import SessionCookie

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=UserProfile,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Register",
)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> UserProfile:
    """Create an account and log the new user in."""
    user = await auth_service.register_user(db, payload)
    cookie.issue(response, user.id)
    return UserProfile.model_validate(user)


@router.post(
    "/login",
    response_model=UserProfile,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Log in",
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> UserProfile:
    user = await auth_service.login_user(db, payload)
    cookie.issue(response, user.id)
    return UserProfile.model_validate(user)


@router.get(
    "/me",
    response_model=UserProfile,
    responses={401: {"model": ErrorResponse}},
    summary="Current user",
)
async def me(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    """Profile of the logged-in user, read fresh from the database."""
    user = await auth_service.show_me(db, user_id)
    return UserProfile.model_validate(user)


@router.delete(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
)
async def logout(
    response: Response,
    cookie: SessionCookie = Depends(get_session_cookie),
) -> MessageResponse:
    auth_service.logout_user(response, cookie)
    return MessageResponse(message="Logged out")
