import sqlite3

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect, text

from bistro.main import create_app
from bistro.migrations import (
    MIGRATIONS,
    MigrationError,
    current_version,
    migrate_latest,
    rollback_last,
)


async def table_names(engine):
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda c: inspect(c).get_table_names()))


async def test_migrates_empty_database_to_latest(raw_engine):
    applied = await migrate_latest(raw_engine)

    assert applied == [m.version for m in MIGRATIONS]
    assert await current_version(raw_engine) == MIGRATIONS[-1].version
    assert {"users", "menu", "orders", "order_lines", "schema_migrations"} <= await table_names(raw_engine)


async def test_second_run_is_a_no_op(raw_engine):
    await migrate_latest(raw_engine)
    assert await migrate_latest(raw_engine) == []


async def test_menu_table_shape(engine):
    async with engine.connect() as conn:
        columns = await conn.run_sync(lambda c: inspect(c).get_columns("menu"))

    by_name = {col["name"]: col for col in columns}
    assert set(by_name) == {"id", "name", "description", "price", "image_url"}
    assert by_name["name"]["nullable"] is False
    assert by_name["price"]["nullable"] is False
    assert by_name["description"]["nullable"] is True


async def test_rollback_reverts_latest_then_reapplies(engine):
    assert await rollback_last(engine) == 3
    tables = await table_names(engine)
    assert "orders" not in tables
    assert "order_lines" not in tables
    assert "menu" in tables
    assert await current_version(engine) == 2

    assert await migrate_latest(engine) == [3]


async def test_rollback_on_empty_database(raw_engine):
    assert await rollback_last(raw_engine) is None


async def test_failed_migration_raises_and_records_nothing(raw_engine):
    async with raw_engine.begin() as conn:
        await conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY)"))

    with pytest.raises(MigrationError):
        await migrate_latest(raw_engine)
    assert await current_version(raw_engine) == 0


def test_startup_aborts_when_migrations_fail(settings, db_path):
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY)")
    conn.commit()
    conn.close()

    app = create_app(settings)
    with pytest.raises(MigrationError):
        with TestClient(app):
            pass
