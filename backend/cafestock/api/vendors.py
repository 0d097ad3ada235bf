"""Vendor directory endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context, require_permission
from cafestock.db.base import get_db
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.vendor import (
    VendorCreate,
    VendorProductCreate,
    VendorProductResponse,
    VendorResponse,
    VendorUpdate,
)
from cafestock.services.vendors import VendorDirectory

router = APIRouter(prefix="/vendors", tags=["vendors"])

READ = PermissionAction.INVENTORY_READ.value
MANAGE = PermissionAction.VENDOR_MANAGE.value


def _directory(db: AsyncSession, ctx: AppContext) -> VendorDirectory:
    return VendorDirectory(db, ctx.notifier, ctx.vendors, ctx.vendor_products)


@router.get("", response_model=list[VendorResponse])
async def list_vendors(
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return await _directory(db, ctx).list_vendors()


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def create_vendor(
    body: VendorCreate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return await _directory(db, ctx).create_vendor(body)


@router.patch("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: UUID,
    body: VendorUpdate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return await _directory(db, ctx).update_vendor(vendor_id, body)


@router.get("/products", response_model=list[VendorProductResponse])
async def list_vendor_products(
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return await _directory(db, ctx).list_vendor_products()


@router.post(
    "/products",
    response_model=VendorProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_vendor_product(
    body: VendorProductCreate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    return await _directory(db, ctx).create_vendor_product(body)


@router.get("/products/by-item/{inventory_item_id}", response_model=list[VendorProductResponse])
async def get_vendors_by_product(
    inventory_item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Available offers for one item, cheapest first.

    Served from the caller's loaded offers; the list is fetched once if empty.
    """
    directory = _directory(db, ctx)
    if not len(directory.products):
        await directory.list_vendor_products()
    return directory.get_vendors_by_product(inventory_item_id)
