"""
FastAPI dependencies shared by the routers.

``require_user_id`` is the authorization gate: routers that need a logged-in
user list it in their ``dependencies`` so the check runs before any handler
in that group, independent of middleware registration order.
"""

from fastapi import Depends, Request

from bistro.core.config import Settings
from bistro.core.errors import AuthenticationError
from bistro.services.session import ANONYMOUS, SessionCookie, SessionData


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_cookie(request: Request) -> SessionCookie:
    return request.app.state.session_cookie


def get_session(request: Request) -> SessionData:
    """Session decoded by the middleware (anonymous if absent or invalid)."""
    return getattr(request.state, "session", ANONYMOUS)


def require_user_id(session: SessionData = Depends(get_session)) -> int:
    """Reject the request unless the session carries an authenticated user."""
    if not session.is_authenticated:
        raise AuthenticationError()
    return session.user_id
