"""Inventory endpoints with RBAC enforcement."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context, require_permission
from cafestock.db.base import get_db
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.inventory import (
    InventoryCategoryGroup,
    InventoryItemCreate,
    InventoryItemView,
    InventoryListResponse,
    InventoryQuantityUpdate,
    LowStockResponse,
)
from cafestock.services.inventory_store import InventoryStore, group_by_category, to_view

router = APIRouter(prefix="/inventory", tags=["inventory"])

READ = PermissionAction.INVENTORY_READ.value
UPDATE = PermissionAction.INVENTORY_UPDATE.value


def _store(db: AsyncSession, ctx: AppContext) -> InventoryStore:
    return InventoryStore(db, ctx.notifier, ctx.inventory)


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    search: str | None = None,
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """List inventory items ordered by name, optionally filtered by name/category."""
    items = await _store(db, ctx).list_items(search=search)
    return InventoryListResponse(items=[to_view(item) for item in items], total=len(items))


@router.get("/low-stock", response_model=LowStockResponse)
async def get_low_stock_items(
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Items at or below their reorder level."""
    items = await _store(db, ctx).low_stock()
    return LowStockResponse(items=[to_view(item) for item in items], count=len(items))


@router.get("/by-category", response_model=list[InventoryCategoryGroup])
async def get_inventory_by_category(
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return group_by_category(await _store(db, ctx).list_items())


@router.get("/{item_id}", response_model=InventoryItemView)
async def get_inventory_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return to_view(await _store(db, ctx).get(item_id))


@router.post("", response_model=InventoryItemView, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    body: InventoryItemCreate,
    current_user: CurrentUser = Depends(require_permission(UPDATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Create a new inventory item (requires inventory:update permission)."""
    return to_view(await _store(db, ctx).create_item(body))


@router.patch("/{item_id}/quantity", response_model=InventoryItemView)
async def update_inventory_quantity(
    item_id: UUID,
    body: InventoryQuantityUpdate,
    current_user: CurrentUser = Depends(require_permission(UPDATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Set the absolute stock quantity for an item."""
    store = _store(db, ctx)
    item = await store.get(item_id)
    if not await store.update_quantity(item_id, body.quantity):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to update inventory",
        )
    return to_view(item)
