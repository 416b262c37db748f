"""
Health, debugging and the /api fallback.

``api_not_found`` must be included after every other /api router: it claims
unmatched /api paths so they get a JSON 404 (or 405 when the path exists
with other methods) instead of falling through to the static frontend.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.routing import APIRoute
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from bistro.core.config import Settings
from bistro.core.errors import NotFoundError
from bistro.database import get_db
from bistro.dependencies import get_app_settings, get_session
from bistro.schemas import HealthResponse
from bistro.services.session import SessionData

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])
fallback_router = APIRouter(include_in_schema=False)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """Verify the database is reachable."""
    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except SQLAlchemyError as e:
        db_status = "unhealthy"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="operational" if db_status == "healthy" else "degraded",
        database=db_status,
        environment=settings.env_mode.value,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/api/debug-session", include_in_schema=False)
async def debug_session(
    session: SessionData = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """Show the decoded session cookie. Development only."""
    if not settings.is_development:
        raise NotFoundError()
    logger.debug(f"🧪 Session: {session}")
    return session.to_dict()


@fallback_router.api_route(
    "/api/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
)
async def api_not_found(request: Request, path: str) -> None:
    # A real route on this path with other methods means 405, not 404
    allowed = set()
    for route in request.app.router.routes:
        if not isinstance(route, APIRoute) or route.endpoint is api_not_found:
            continue
        match, _ = route.matches(request.scope)
        if match == Match.PARTIAL:
            allowed.update(route.methods)
    if allowed:
        raise StarletteHTTPException(
            status_code=405,
            detail="Method Not Allowed",
            headers={"Allow": ", ".join(sorted(allowed))},
        )
    raise NotFoundError(f"No API route for /api/{path}")
