"""
FastAPI Application Entry Point

Bistro Ordering Backend - composition root.

``create_app`` wires configuration, database, session cookie, middleware,
routers, error handlers and the static frontend into one application. All
process-wide state is built here once and stored on ``app.state``.

Endpoints:
    - POST   /api/auth/register
    - POST   /api/auth/login
    - GET    /api/auth/me          (session required)
    - DELETE /api/auth/logout
    - POST   /api/orders           (session required)
    - GET    /api/orders           (session required)
    - GET    /api/menu, /api/menu/{id}
    - GET    /health
    - everything else outside /api: static frontend bundle

Run:
    python -m bistro
    uvicorn bistro.main:create_app --factory

Author: Your Name
Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bistro.core.config import Settings, load_settings_or_exit, setup_logging
from bistro.core.errors import AppError, InternalError
from bistro.database import build_engine, build_session_maker
from bistro.middleware import decode_session, log_requests
from bistro.migrations import MigrationError, migrate_latest
from bistro.routers import auth, menu, orders, system
from bistro.services.session import SessionCookie

logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.

    Migrations run before the server accepts traffic; a failure aborts
    startup.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   CORS origin: {settings.cors_origin}")
    logger.info("=" * 60)

    try:
        await migrate_latest(app.state.engine)
    except MigrationError as e:
        logger.critical(f"❌ Migration failed: {e}")
        await app.state.engine.dispose()
        raise

    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await app.state.engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render any service error as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.status_code} {exc.message}")
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are a 400, not FastAPI's default 422."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = [str(part) for part in first.get("loc", ()) if part != "body"]
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{'.'.join(location)}: {message}"
    else:
        message = "Invalid request"
    logger.warning(f"{request.method} {request.url.path}: 400 {message}")
    return _error_response(400, message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors (unknown path, wrong method) use the same JSON shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures never leak driver text to the client."""
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return _error_response(500, InternalError.default_message)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    settings: Settings = request.app.state.settings
    if settings.debug:
        return _error_response(500, InternalError.default_message, detail=str(exc))
    return _error_response(500, InternalError.default_message)


async def catch_unhandled_errors(request: Request, call_next):
    """
    Render unexpected exceptions inside the middleware stack.

    The ``Exception`` handler alone runs outside CORSMiddleware, so its 500
    responses would reach browsers without CORS headers.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return await global_exception_handler(request, exc)


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Explicit configuration; loaded from the environment
            (exiting on missing values) when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or load_settings_or_exit()
    setup_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name,
        description="Restaurant ordering API with cookie-based sessions.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_maker = build_session_maker(engine)
    app.state.session_cookie = SessionCookie.from_settings(settings)

    # Middleware: last added runs first
    app.middleware("http")(catch_unhandled_errors)
    app.middleware("http")(decode_session)
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(orders.router)
    app.include_router(menu.router)
    app.include_router(system.fallback_router)

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="frontend")
        logger.info(f"Serving frontend from {static_dir}")
    else:
        logger.warning(f"⚠️ Static directory {static_dir} not found, frontend not served")

    return app
