"""Purchase order endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context, require_permission
from cafestock.db.base import get_db
from cafestock.models.purchase_order import PurchaseOrderStatus
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.purchase_order import (
    ConvertRequestsBody,
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    PurchaseOrderStatusUpdate,
)
from cafestock.services.purchase_orders import PurchaseOrderService
from cafestock.services.transitions import PURCHASE_ORDER_TRANSITIONS

router = APIRouter(prefix="/purchase-orders", tags=["purchase-orders"])

MANAGE = PermissionAction.PURCHASE_ORDER_MANAGE.value


@router.get("", response_model=PurchaseOrderListResponse)
async def list_purchase_orders(
    status: PurchaseOrderStatus | None = None,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    items, total = await PurchaseOrderService(db, ctx.notifier, current_user.id).list_orders(status)
    return PurchaseOrderListResponse(
        items=[PurchaseOrderResponse.model_validate(po) for po in items],
        total=total,
    )


@router.get("/transitions", response_model=dict[str, list[str]])
async def get_purchase_order_transitions(
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
):
    """Allowed next statuses for each purchase order status."""
    return PURCHASE_ORDER_TRANSITIONS.as_dict()


@router.get("/{po_id}", response_model=PurchaseOrderResponse)
async def get_purchase_order(
    po_id: UUID,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    po = await PurchaseOrderService(db, ctx.notifier, current_user.id).get(po_id)
    return PurchaseOrderResponse.model_validate(po)


@router.post("", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    body: PurchaseOrderCreate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Create a purchase order. total_amount is stored exactly as supplied."""
    service = PurchaseOrderService(db, ctx.notifier, current_user.id)
    return PurchaseOrderResponse.model_validate(await service.create_purchase_order(body))


@router.post(
    "/from-requests",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def convert_requests_to_purchase_order(
    body: ConvertRequestsBody,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Turn approved inventory requests into a single purchase order."""
    service = PurchaseOrderService(db, ctx.notifier, current_user.id)
    return PurchaseOrderResponse.model_validate(await service.convert_requests(body))


@router.patch("/{po_id}/status", response_model=PurchaseOrderResponse)
async def update_purchase_order_status(
    po_id: UUID,
    body: PurchaseOrderStatusUpdate,
    current_user: CurrentUser = Depends(require_permission(MANAGE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    service = PurchaseOrderService(db, ctx.notifier, current_user.id)
    return PurchaseOrderResponse.model_validate(await service.update_status(po_id, body.status))
