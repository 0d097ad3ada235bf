"""Request builder endpoints: the signed-in staff member's replenishment cart."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.app_context import AppContext
from cafestock.core.deps import get_app_context, require_permission
from cafestock.db.base import get_db
from cafestock.models.role import PermissionAction
from cafestock.schemas.auth import CurrentUser
from cafestock.schemas.inventory_request import (
    BuilderQuantityChange,
    ConfirmLineRequest,
    RequestBuilderState,
    SubmitRequestBody,
    SubmitRequestResult,
)
from cafestock.services.inventory_store import InventoryStore
from cafestock.services.request_submission import RequestSubmitter, estimated_delivery_date

router = APIRouter(prefix="/request-builder", tags=["request-builder"])

CREATE = PermissionAction.REQUEST_CREATE.value


def _state(ctx: AppContext) -> RequestBuilderState:
    builder = ctx.builder
    return RequestBuilderState(
        request_mode=builder.request_mode,
        open_lines=builder.open_lines(),
        pending_lines=[line.to_view() for line in builder.pending_lines()],
        errors=dict(builder.errors),
        total_cost=builder.total_cost(),
        estimated_delivery_date=estimated_delivery_date(),
    )


@router.get("", response_model=RequestBuilderState)
async def get_builder_state(
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
):
    return _state(ctx)


@router.post("/mode", response_model=RequestBuilderState)
async def set_request_mode(
    enabled: bool | None = None,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
):
    """Set request mode, or toggle it when ``enabled`` is omitted."""
    if enabled is None:
        ctx.builder.toggle_request_mode()
    else:
        ctx.builder.set_request_mode(enabled)
    return _state(ctx)


@router.post("/items/{item_id}/open", response_model=RequestBuilderState)
async def open_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    item = await InventoryStore(db, ctx.notifier, ctx.inventory).get(item_id)
    ctx.builder.open(item)
    return _state(ctx)


@router.post("/items/{item_id}/increment", response_model=BuilderQuantityChange)
async def increment_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Raise the open quantity by one. ``capped=true`` means the cap refused it."""
    item = await InventoryStore(db, ctx.notifier, ctx.inventory).get(item_id)
    return ctx.builder.increment(item)


@router.post("/items/{item_id}/decrement", response_model=BuilderQuantityChange)
async def decrement_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    item = await InventoryStore(db, ctx.notifier, ctx.inventory).get(item_id)
    return ctx.builder.decrement(item)


@router.post("/items/{item_id}/cancel", response_model=RequestBuilderState)
async def cancel_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
):
    ctx.builder.cancel(item_id)
    return _state(ctx)


@router.post("/items/{item_id}/confirm", response_model=RequestBuilderState)
async def confirm_item(
    item_id: UUID,
    body: ConfirmLineRequest,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Move a quantity into the pending request. Over-cap quantities are refused."""
    item = await InventoryStore(db, ctx.notifier, ctx.inventory).get(item_id)
    if not ctx.builder.confirm(item, body.quantity):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=ctx.builder.errors.get(item_id, "Quantity refused"),
        )
    return _state(ctx)


@router.delete("/items/{item_id}", response_model=RequestBuilderState)
async def remove_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
):
    ctx.builder.remove(item_id)
    return _state(ctx)


@router.post("/submit", response_model=SubmitRequestResult, status_code=status.HTTP_201_CREATED)
async def submit_request(
    body: SubmitRequestBody,
    current_user: CurrentUser = Depends(require_permission(CREATE)),
    ctx: AppContext = Depends(get_app_context),
    db: AsyncSession = Depends(get_db),
):
    """Persist one inventory request per pending line and empty the builder."""
    submitter = RequestSubmitter(db, ctx.notifier, current_user.id)
    requests = await submitter.submit_builder(ctx.builder, notes=body.notes, atomic=body.atomic)
    return SubmitRequestResult(
        submitted=len(requests),
        request_ids=[r.id for r in requests],
        estimated_delivery_date=estimated_delivery_date(),
    )
