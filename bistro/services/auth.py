"""
Authentication Service

Registers users, verifies login credentials, resolves the current user from
the session and clears the session on logout. Cookie handling is delegated
to SessionCookie; this module never sees raw tokens.

Login failures use one message for "no such user" and "wrong password" so
the API cannot be used to enumerate accounts.
"""

import logging
from typing import Optional

from fastapi import Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.core.errors import AuthenticationError, ConflictError
from bistro.models import User
from bistro.schemas import LoginRequest, RegisterRequest
from bistro.services.passwords import DUMMY_HASH, hash_password, verify_password
from bistro.services.session import SessionCookie

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
USERNAME_TAKEN = "Username is already taken"


async def _find_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, payload: RegisterRequest) -> User:
    """
    Create a new account.

    Args:
        db: Database session
        payload: Validated registration data (username already normalized)

    Returns:
        The persisted user

    Raises:
        ConflictError: If the username already exists
    """
    if await _find_by_username(db, payload.username) is not None:
        raise ConflictError(USERNAME_TAKEN)

    user = User(
        username=payload.username,
        password_hash=await hash_password(payload.password),
        display_name=payload.display_name,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration
        await db.rollback()
        raise ConflictError(USERNAME_TAKEN)

    logger.info(f"User #{user.id} registered ({user.username})")
    return user


async def login_user(db: AsyncSession, payload: LoginRequest) -> User:
    """
    Verify credentials.

    Raises:
        AuthenticationError: Unknown username or wrong password (same message)
    """
    user = await _find_by_username(db, payload.username)
    if user is None:
        await verify_password(payload.password, DUMMY_HASH)
        logger.info(f"Login failed for unknown user '{payload.username}'")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not await verify_password(payload.password, user.password_hash):
        logger.info(f"Login failed for user #{user.id}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info(f"User #{user.id} logged in")
    return user


async def show_me(db: AsyncSession, user_id: Optional[int]) -> User:
    """
    Return the user referenced by the session, fetched fresh from storage.

    Raises:
        AuthenticationError: No session, or the user no longer exists
    """
    if user_id is None:
        raise AuthenticationError()

    user = await db.get(User, user_id)
    if user is None:
        logger.warning(f"Session references missing user #{user_id}")
        raise AuthenticationError()
    return user


def logout_user(response: Response, cookie: SessionCookie) -> None:
    """Clear the session cookie. Safe to call without an active session."""
    cookie.clear(response)
