"""
Shared fixtures.

HTTP tests drive the full application through TestClient against a
temporary SQLite file; service tests use an AsyncSession on the same kind
of database directly.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from bistro.core.config import Settings
from bistro.database import build_engine, build_session_maker
from bistro.main import create_app
from bistro.migrations import migrate_latest
from bistro.models import MenuItem, User
from tests.helpers import FRONTEND_ORIGIN, register

SESSION_SECRET = "test-session-secret-0123456789"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "bistro.db"


@pytest.fixture
def static_dir(tmp_path):
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text("<h1>bistro</h1>", encoding="utf-8")
    return dist


@pytest.fixture
def settings(db_path, static_dir) -> Settings:
    return Settings(
        _env_file=None,
        port=3000,
        cors_origin=FRONTEND_ORIGIN,
        session_secret=SESSION_SECRET,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        env_mode="development",
        static_dir=str(static_dir),
    )


# =============================================================================
# HTTP FIXTURES
# =============================================================================

@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded_menu(client, db_path):
    """Menu rows written out-of-band, the way production seeding works."""
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO menu (id, name, description, price, image_url) VALUES "
                "(1, 'Margherita', 'Tomato and mozzarella', 9.50, '/img/margherita.jpg'), "
                "(2, 'Tiramisu', NULL, 4.25, NULL)"
            )
        )
    engine.dispose()
    return {1: Decimal("9.50"), 2: Decimal("4.25")}


@pytest.fixture
def logged_in(client):
    response = register(client)
    assert response.status_code == 201
    return response.json()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

@pytest_asyncio.fixture
async def raw_engine(settings):
    engine = build_engine(settings)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def engine(raw_engine):
    await migrate_latest(raw_engine)
    return raw_engine


@pytest_asyncio.fixture
async def db(engine):
    async with build_session_maker(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def menu(db):
    items = [
        MenuItem(name="Margherita", price=Decimal("9.50")),
        MenuItem(name="Tiramisu", description="Coffee dessert", price=Decimal("4.25")),
    ]
    db.add_all(items)
    await db.commit()
    return items


@pytest_asyncio.fixture
async def users(db):
    alice = User(username="alice", password_hash="not-used")
    bob = User(username="bob", password_hash="not-used")
    db.add_all([alice, bob])
    await db.commit()
    return alice, bob
