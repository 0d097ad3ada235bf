"""Inventory request approval endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context, require_permission
from cafestock.db.base import get_db
from cafestock.models.inventory_request import InventoryRequestStatus
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.inventory_request import (
    ApproveRequestBody,
    InventoryRequestHistoryResponse,
    InventoryRequestListResponse,
    InventoryRequestResponse,
    RejectRequestBody,
)
from cafestock.services.inventory_requests import InventoryRequestService

router = APIRouter(prefix="/inventory-requests", tags=["inventory-requests"])

READ = PermissionAction.INVENTORY_READ.value
APPROVE = PermissionAction.REQUEST_APPROVE.value


@router.get("", response_model=InventoryRequestListResponse)
async def list_requests(
    status: InventoryRequestStatus | None = None,
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Newest first, each with a summary of its inventory item."""
    service = InventoryRequestService(db, ctx.notifier, current_user.id)
    items, total = await service.list_requests(status)
    return InventoryRequestListResponse(
        items=[InventoryRequestResponse.model_validate(r) for r in items],
        total=total,
    )


@router.get("/{request_id}", response_model=InventoryRequestResponse)
async def get_request(
    request_id: UUID,
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    request = await InventoryRequestService(db, ctx.notifier, current_user.id).get(request_id)
    return InventoryRequestResponse.model_validate(request)


@router.post("/{request_id}/approve", response_model=InventoryRequestResponse)
async def approve_request(
    request_id: UUID,
    body: ApproveRequestBody,
    current_user: CurrentUser = Depends(require_permission(APPROVE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    service = InventoryRequestService(db, ctx.notifier, current_user.id)
    return InventoryRequestResponse.model_validate(await service.approve(request_id, body.notes))


@router.post("/{request_id}/reject", response_model=InventoryRequestResponse)
async def reject_request(
    request_id: UUID,
    body: RejectRequestBody,
    current_user: CurrentUser = Depends(require_permission(APPROVE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    service = InventoryRequestService(db, ctx.notifier, current_user.id)
    request = await service.reject(request_id, body.rejected_reason, body.notes)
    return InventoryRequestResponse.model_validate(request)


@router.get("/{request_id}/history", response_model=list[InventoryRequestHistoryResponse])
async def get_request_history(
    request_id: UUID,
    current_user: CurrentUser = Depends(require_permission(READ)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    service = InventoryRequestService(db, ctx.notifier, current_user.id)
    await service.get(request_id)
    return [
        InventoryRequestHistoryResponse.model_validate(h)
        for h in await service.history(request_id)
    ]
