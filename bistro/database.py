"""
Database Connection Module
Builds the SQLAlchemy async engine and session factory from Settings.

The engine and session factory are created once by the app factory and
stored on ``app.state``; request handlers get a session through ``get_db``.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bistro.core.config import Settings


# Base class for all our models
class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    SQLite has no connection pool sizing, so pool options are only passed
    to server databases.
    """
    url = make_url(settings.database_url)
    options = {"echo": settings.db_echo}
    if not url.get_backend_name().startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size  # Connection pool size
        options["max_overflow"] = settings.db_max_overflow  # Extra connections when pool is full
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory - creates new database sessions."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False  # Objects remain accessible after commit
    )


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    session_maker = request.app.state.session_maker
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
