"""
Command line entry point.

Usage:
    python -m bistro                     # serve (migrates first)
    python -m bistro migrate             # apply pending migrations
    python -m bistro rollback            # revert the latest migration
    python -m bistro seed-menu menu.json # insert/update menu items

All commands read configuration from the environment and exit with status 1
when it is incomplete.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import uvicorn
from pydantic import TypeAdapter, ValidationError

from bistro.core.config import Settings, load_settings_or_exit, setup_logging
from bistro.database import build_engine, build_session_maker
from bistro.migrations import MigrationError, migrate_latest, rollback_last
from bistro.schemas import MenuItemSeed
from bistro.services.menu import seed_menu

logger = logging.getLogger("bistro.cli")


def serve(settings: Settings) -> None:
    from bistro.main import create_app

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_level="debug" if settings.debug else "info",
    )


async def run_migrations(settings: Settings, rollback: bool = False) -> None:
    engine = build_engine(settings)
    try:
        if rollback:
            version = await rollback_last(engine)
            logger.info(f"Rolled back version {version}" if version else "Nothing to roll back")
        else:
            await migrate_latest(engine)
    finally:
        await engine.dispose()


async def run_seed(settings: Settings, path: Path) -> dict[str, int]:
    entries = TypeAdapter(list[MenuItemSeed]).validate_python(
        json.loads(path.read_text(encoding="utf-8"))
    )
    engine = build_engine(settings)
    try:
        await migrate_latest(engine)
        async with build_session_maker(engine)() as db:
            return await seed_menu(db, entries)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bistro", description="Bistro ordering backend")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("serve", help="Run the HTTP server (default)")
    sub.add_parser("migrate", help="Apply pending migrations")
    sub.add_parser("rollback", help="Revert the latest migration")
    seed = sub.add_parser("seed-menu", help="Load menu items from a JSON file")
    seed.add_argument("file", type=Path, help="JSON list of menu items")
    args = parser.parse_args(argv)

    settings = load_settings_or_exit()
    setup_logging(debug=settings.debug)

    command = args.command or "serve"
    try:
        if command == "serve":
            serve(settings)
        elif command == "migrate":
            asyncio.run(run_migrations(settings))
        elif command == "rollback":
            asyncio.run(run_migrations(settings, rollback=True))
        elif command == "seed-menu":
            try:
                asyncio.run(run_seed(settings, args.file))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.critical(f"❌ Could not load menu file: {e}")
                return 1
    except MigrationError as e:
        logger.critical(f"❌ Migration failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
