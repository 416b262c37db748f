"""
Menu Service

Read access to the menu for the API, plus the out-of-band seeding used by
``python -m bistro seed-menu``. There is no HTTP path that mutates the menu.
"""

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.core.errors import NotFoundError
from bistro.models import MenuItem
from bistro.schemas import MenuItemSeed

logger = logging.getLogger(__name__)


async def list_menu(db: AsyncSession) -> list[MenuItem]:
    """Return every menu item ordered by id."""
    result = await db.execute(select(MenuItem).order_by(MenuItem.id))
    return list(result.scalars().all())


async def get_menu_item(db: AsyncSession, item_id: int) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if item is None:
        raise NotFoundError(f"Menu item {item_id} not found")
    return item


async def seed_menu(db: AsyncSession, entries: Iterable[MenuItemSeed]) -> dict[str, int]:
    """
    Insert or update menu items, matching existing rows by name.

    All entries are written in one transaction.

    Returns:
        Counts of created and updated rows
    """
    result = await db.execute(select(MenuItem))
    existing = {item.name: item for item in result.scalars()}

    created = updated = 0
    for entry in entries:
        item = existing.get(entry.name)
        if item is None:
            item = MenuItem(name=entry.name)
            db.add(item)
            existing[entry.name] = item
            created += 1
        else:
            updated += 1
        item.description = entry.description
        item.price = entry.price
        item.image_url = entry.image_url

    await db.commit()
    logger.info(f"✅ Menu seeded ({created} created, {updated} updated)")
    return {"created": created, "updated": updated}
