"""Delivery tracking endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context, require_permission
from cafestock.db.base import get_db
from cafestock.models.delivery import DeliveryStatus
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.delivery import (
    DeliveryCreate,
    DeliveryItemsUpdate,
    DeliveryListResponse,
    DeliveryResponse,
    DeliveryStatusUpdate,
    ReconciliationReport,
)
from cafestock.services.deliveries import DeliveryService

router = APIRouter(prefix="/deliveries", tags=["deliveries"])

MANAGE = PermissionAction.DELIVERY_MANAGE.value


@router.get("", response_model=DeliveryListResponse)
async def list_deliveries(
    status: DeliveryStatus | None = None,
    purchase_order_id: UUID | None = None,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Deliveries with their purchase order, vendor, outlet and items."""
    service = DeliveryService(db, ctx.notifier, current_user.id)
    items, total = await service.list_deliveries(status, purchase_order_id)
    return DeliveryListResponse(
        items=[DeliveryResponse.model_validate(d) for d in items],
        total=total,
    )


@router.get("/{delivery_id}", response_model=DeliveryResponse)
async def get_delivery(
    delivery_id: UUID,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    delivery = await DeliveryService(db, ctx.notifier, current_user.id).get(delivery_id)
    return DeliveryResponse.model_validate(delivery)


@router.post("", response_model=DeliveryResponse, status_code=status.HTTP_201_CREATED)
async def create_delivery(
    body: DeliveryCreate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    service = DeliveryService(db, ctx.notifier, current_user.id)
    return DeliveryResponse.model_validate(await service.create_delivery(body))


@router.patch("/{delivery_id}/status", response_model=DeliveryResponse)
async def update_delivery_status(
    delivery_id: UUID,
    body: DeliveryStatusUpdate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Moving to ``received`` stamps received_date. Inventory is not touched."""
    service = DeliveryService(db, ctx.notifier, current_user.id)
    delivery = await service.update_delivery_status(delivery_id, body.status)
    return DeliveryResponse.model_validate(delivery)


@router.patch("/{delivery_id}/items", response_model=DeliveryResponse)
async def record_delivery_item_quantities(
    delivery_id: UUID,
    body: DeliveryItemsUpdate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    service = DeliveryService(db, ctx.notifier, current_user.id)
    delivery = await service.record_item_quantities(delivery_id, body.items)
    return DeliveryResponse.model_validate(delivery)


@router.get("/{delivery_id}/reconciliation", response_model=ReconciliationReport)
async def get_reconciliation_report(
    delivery_id: UUID,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Ordered vs delivered vs received, per line. Read-only."""
    return await DeliveryService(db, ctx.notifier, current_user.id).reconciliation_report(delivery_id)


@router.post("/{delivery_id}/apply-stock", response_model=DeliveryResponse)
async def apply_received_stock(
    delivery_id: UUID,
    current_user: CurrentUser = Depends(
        require_permission(MANAGE, PermissionAction.INVENTORY_UPDATE.value)
    ),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Add received quantities to inventory. Only once, only after receipt."""
    service = DeliveryService(db, ctx.notifier, current_user.id)
    delivery = await service.apply_received_stock(delivery_id)
    return DeliveryResponse.model_validate(delivery)
