"""
Public, read-only menu endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.database import get_db
from bistro.schemas import ErrorResponse, MenuItemResponse
from bistro.services import menu as menu_service

router = APIRouter(prefix="/api/menu", tags=["Menu"])


@router.get("", response_model=list[MenuItemResponse], summary="List Menu")
async def list_menu(db: AsyncSession = Depends(get_db)) -> list[MenuItemResponse]:
    items = await menu_service.list_menu(db)
    return [MenuItemResponse.model_validate(item) for item in items]


@router.get(
    "/{item_id}",
    response_model=MenuItemResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get Menu Item",
)
async def get_menu_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    item = await menu_service.get_menu_item(db, item_id)
    return MenuItemResponse.model_validate(item)
