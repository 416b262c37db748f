"""
Order Service

Creates and lists orders for authenticated users.

Prices always come from the menu table at the moment the order is placed;
each line keeps a snapshot of the unit price so later menu changes do not
rewrite past orders. The order row and all of its lines are written in a
single transaction.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bistro.core.errors import NotFoundError, ValidationError
from bistro.models import MenuItem, Order, OrderLine, OrderStatus
from bistro.schemas import OrderLineCreate

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
MAX_LINE_QUANTITY = 1000
# Largest value a NUMERIC(10,2) column holds
MAX_TOTAL = Decimal("99999999.99")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _validate_lines(lines: Sequence[OrderLineCreate]) -> None:
    if not lines:
        raise ValidationError("Order must contain at least one line")
    for index, line in enumerate(lines):
        quantity = line.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(
                f"lines[{index}].quantity must be a positive integer"
            )
        if quantity > MAX_LINE_QUANTITY:
            raise ValidationError(
                f"lines[{index}].quantity must not exceed {MAX_LINE_QUANTITY}"
            )


async def create_order(
    db: AsyncSession,
    user_id: int,
    lines: Sequence[OrderLineCreate],
) -> Order:
    """
    Create an order for ``user_id``.

    Args:
        db: Database session
        user_id: Authenticated caller
        lines: Requested (menu item, quantity) pairs

    Returns:
        The persisted order with its lines and computed total

    Raises:
        ValidationError: No lines, a quantity that is not a positive integer
            or above MAX_LINE_QUANTITY, or a total too large to store
        NotFoundError: A referenced menu item does not exist
    """
    _validate_lines(lines)

    requested_ids = {line.menu_item_id for line in lines}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(requested_ids)))
    menu = {item.id: item for item in result.scalars()}

    for line in lines:
        if line.menu_item_id not in menu:
            raise NotFoundError(f"Menu item {line.menu_item_id} not found")

    order = Order(user_id=user_id, status=OrderStatus.CREATED)
    total = Decimal("0")
    for line in lines:
        item = menu[line.menu_item_id]
        unit_price = _money(item.price)
        line_total = _money(unit_price * line.quantity)
        order.lines.append(
            OrderLine(
                menu_item=item,
                quantity=line.quantity,
                unit_price=unit_price,
                line_total=line_total,
            )
        )
        total += line_total
    order.total = _money(total)
    if order.total > MAX_TOTAL:
        raise ValidationError(f"Order total must not exceed {MAX_TOTAL}")

    db.add(order)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(f"Order for user #{user_id} rolled back")
        raise

    logger.info(
        f"Order #{order.id} created for user #{user_id} "
        f"({len(order.lines)} lines, total {order.total})"
    )
    return order


async def get_orders(db: AsyncSession, user_id: int) -> list[Order]:
    """Return the caller's orders with their lines, newest first."""
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .options(selectinload(Order.lines).selectinload(OrderLine.menu_item))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(result.scalars().all())
