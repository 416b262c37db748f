"""
Order endpoints. Every route in this group requires a session.

    POST /api/orders   place an order
    GET  /api/orders   list the caller's orders, newest first
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.database import get_db
from bistro.dependencies import require_user_id
from bistro.schemas import ErrorResponse, OrderCreate, OrderResponse
from bistro.services import orders as order_service

router = APIRouter(
    prefix="/api/orders",
    tags=["Orders"],
    dependencies=[Depends(require_user_id)],
    responses={401: {"model": ErrorResponse}},
)


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create Order",
)
async def create_order(
    order_data: OrderCreate,
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """
    Create a new order for the logged-in user.

    Line prices and the total are computed from the current menu prices.
    """
    order = await order_service.create_order(db, user_id, order_data.lines)
    return OrderResponse.model_validate(order)


@router.get(
    "",
    response_model=list[OrderResponse],
    summary="List Orders",
)
async def list_orders(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    orders = await order_service.get_orders(db, user_id)
    return [OrderResponse.model_validate(order) for order in orders]
