"""
Schema Migrations

Versioned, ordered schema changes applied at startup to bring the database
to the expected shape. Applied versions are recorded in ``schema_migrations``;
each migration runs in its own transaction so a failure leaves the database
at the last good version.

Each migration declares its tables against a private MetaData so that later
model changes never rewrite history.

Usage:
    from bistro.migrations import migrate_latest

    applied = await migrate_latest(engine)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    delete,
    insert,
    select,
)
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class MigrationError(RuntimeError):
    """A migration could not be applied or reverted."""


@dataclass(frozen=True)
class Migration:
    """
    A single schema change.

    Attributes:
        version: Strictly increasing version number
        name: Human readable identifier
        upgrade: Applies the change on a sync Connection
        downgrade: Reverts the change on a sync Connection
    """
    version: int
    name: str
    upgrade: Callable[[Connection], None]
    downgrade: Callable[[Connection], None]


_version_metadata = MetaData()

schema_migrations = Table(
    "schema_migrations",
    _version_metadata,
    Column("version", Integer, primary_key=True, autoincrement=False),
    Column("name", String(100), nullable=False),
    Column("applied_at", DateTime(timezone=True), nullable=False),
)


# =============================================================================
# 001 - USERS
# =============================================================================

def _users_table(metadata: MetaData) -> Table:
    return Table(
        "users",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("username", String(50), nullable=False, unique=True, index=True),
        Column("password_hash", String(255), nullable=False),
        Column("display_name", String(100), nullable=True),
        Column("created_at", DateTime(timezone=True), nullable=False),
    )


def _create_users(conn: Connection) -> None:
    _users_table(MetaData()).create(conn)


def _drop_users(conn: Connection) -> None:
    _users_table(MetaData()).drop(conn)


# =============================================================================
# 002 - MENU
# =============================================================================

def _menu_table(metadata: MetaData) -> Table:
    return Table(
        "menu",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("name", String(100), nullable=False),
        Column("description", Text),
        Column("price", Numeric(10, 2), nullable=False),
        Column("image_url", Text),
    )


def _create_menu(conn: Connection) -> None:
    _menu_table(MetaData()).create(conn)


def _drop_menu(conn: Connection) -> None:
    _menu_table(MetaData()).drop(conn)


# =============================================================================
# 003 - ORDERS
# =============================================================================

def _order_tables(metadata: MetaData) -> tuple[Table, Table]:
    # Referenced tables only need their keys for FK resolution
    Table("users", metadata, Column("id", Integer, primary_key=True))
    Table("menu", metadata, Column("id", Integer, primary_key=True))

    orders = Table(
        "orders",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
        Column("status", String(20), nullable=False),
        Column("total", Numeric(10, 2), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False, index=True),
    )
    order_lines = Table(
        "order_lines",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(
            "order_id",
            Integer,
            ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        Column("menu_item_id", Integer, ForeignKey("menu.id"), nullable=False),
        Column("quantity", Integer, nullable=False),
        Column("unit_price", Numeric(10, 2), nullable=False),
        Column("line_total", Numeric(10, 2), nullable=False),
    )
    return orders, order_lines


def _create_orders(conn: Connection) -> None:
    orders, order_lines = _order_tables(MetaData())
    orders.create(conn)
    order_lines.create(conn)


def _drop_orders(conn: Connection) -> None:
    orders, order_lines = _order_tables(MetaData())
    order_lines.drop(conn)
    orders.drop(conn)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "create_users_table", _create_users, _drop_users),
    Migration(2, "create_menu_table", _create_menu, _drop_menu),
    Migration(3, "create_orders_tables", _create_orders, _drop_orders),
)


# =============================================================================
# RUNNER
# =============================================================================

def _ensure_version_table(conn: Connection) -> None:
    _version_metadata.create_all(conn, checkfirst=True)


def _applied_versions(conn: Connection) -> set[int]:
    return set(conn.execute(select(schema_migrations.c.version)).scalars())


async def current_version(engine: AsyncEngine) -> int:
    """Return the highest applied migration version (0 for an empty database)."""
    async with engine.begin() as conn:
        await conn.run_sync(_ensure_version_table)
        applied = await conn.run_sync(_applied_versions)
    return max(applied, default=0)


async def migrate_latest(engine: AsyncEngine) -> list[int]:
    """
    Apply every pending migration in version order.

    Returns:
        Versions applied by this call (empty when already up to date)

    Raises:
        MigrationError: If any migration fails; earlier ones stay applied
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(_ensure_version_table)
            applied = await conn.run_sync(_applied_versions)
    except SQLAlchemyError as e:
        raise MigrationError(f"Could not read schema version: {e}") from e

    newly_applied = []
    for migration in sorted(MIGRATIONS, key=lambda m: m.version):
        if migration.version in applied:
            continue
        logger.info(f"Applying migration {migration.version:03d}_{migration.name}")
        try:
            async with engine.begin() as conn:
                await conn.run_sync(migration.upgrade)
                await conn.execute(
                    insert(schema_migrations).values(
                        version=migration.version,
                        name=migration.name,
                        applied_at=datetime.now(timezone.utc),
                    )
                )
        except SQLAlchemyError as e:
            raise MigrationError(
                f"Migration {migration.version:03d}_{migration.name} failed: {e}"
            ) from e
        newly_applied.append(migration.version)

    if newly_applied:
        logger.info(f"✅ Migrations complete (now at version {newly_applied[-1]})")
    else:
        logger.info("✅ Database schema already up to date")
    return newly_applied


async def rollback_last(engine: AsyncEngine) -> int | None:
    """
    Revert the most recently applied migration.

    Returns:
        The reverted version, or None if nothing was applied
    """
    version = await current_version(engine)
    if version == 0:
        logger.info("Nothing to roll back")
        return None

    migration = next((m for m in MIGRATIONS if m.version == version), None)
    if migration is None:
        raise MigrationError(f"Database is at unknown version {version}")
    logger.info(f"Reverting migration {migration.version:03d}_{migration.name}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(migration.downgrade)
            await conn.execute(
                delete(schema_migrations).where(schema_migrations.c.version == version)
            )
    except SQLAlchemyError as e:
        raise MigrationError(
            f"Rollback of {migration.version:03d}_{migration.name} failed: {e}"
        ) from e
    return version
