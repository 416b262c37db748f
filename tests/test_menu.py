import json
from decimal import Decimal

import pytest

from bistro.__main__ import run_seed
from bistro.core.errors import NotFoundError
from bistro.schemas import MenuItemSeed
from bistro.services import menu as menu_service


async def test_seed_creates_then_updates_by_name(db):
    first = await menu_service.seed_menu(
        db,
        [
            MenuItemSeed(name="Soup", price=Decimal("5.00")),
            MenuItemSeed(name="Bread", price=Decimal("2.50"), image_url="/bread.jpg"),
        ],
    )
    second = await menu_service.seed_menu(
        db, [MenuItemSeed(name="Soup", description="Daily", price=Decimal("5.50"))]
    )

    assert first == {"created": 2, "updated": 0}
    assert second == {"created": 0, "updated": 1}

    items = await menu_service.list_menu(db)
    assert [(i.name, i.price, i.description) for i in items] == [
        ("Soup", Decimal("5.50"), "Daily"),
        ("Bread", Decimal("2.50"), None),
    ]


async def test_get_menu_item_not_found(db):
    with pytest.raises(NotFoundError):
        await menu_service.get_menu_item(db, 1)


async def test_seed_command_reads_camel_case_json(settings, tmp_path):
    menu_file = tmp_path / "menu.json"
    menu_file.write_text(
        json.dumps([{"name": "Pie", "price": "3.20", "imageUrl": "/pie.jpg"}]),
        encoding="utf-8",
    )

    assert await run_seed(settings, menu_file) == {"created": 1, "updated": 0}
