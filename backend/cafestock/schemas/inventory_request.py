"""Replenishment request schemas: builder state, submission, approval."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cafestock.models.inventory_request import InventoryRequestStatus


# ── Request builder ────────────────────────────────
class RequestLineItem(BaseModel):
    """A line held in the request builder, not yet persisted."""
    item_id: UUID
    requested_quantity: int = Field(..., ge=1)


class RequestLineView(RequestLineItem):
    name: str
    unit: str
    max_quantity: int
    line_cost: Decimal


class BuilderQuantityChange(BaseModel):
    """Outcome of increment/decrement. ``capped`` means the change was refused."""
    item_id: UUID
    requested_quantity: int
    max_quantity: int
    capped: bool = False
    message: str | None = None


class ConfirmLineRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class RequestBuilderState(BaseModel):
    request_mode: bool
    open_lines: list[RequestLineItem]
    pending_lines: list[RequestLineView]
    errors: dict[UUID, str]
    total_cost: Decimal
    estimated_delivery_date: date


class SubmitRequestBody(BaseModel):
    notes: str | None = Field(None, max_length=2000)
    atomic: bool = True


class SubmitRequestResult(BaseModel):
    submitted: int
    request_ids: list[UUID]
    estimated_delivery_date: date


# ── Persisted requests ─────────────────────────────
class InventoryItemSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    quantity: int
    reorder_level: int
    unit: str
    category: str | None = None


class InventoryRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    inventory_item_id: UUID
    staff_entered_quantity: int
    requested_quantity: int
    notes: str | None = None
    status: InventoryRequestStatus
    rejected_reason: str | None = None
    approved_at: datetime | None = None
    approved_by_user_id: UUID | None = None
    purchase_order_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    inventory_item: InventoryItemSummary | None = None


class InventoryRequestListResponse(BaseModel):
    items: list[InventoryRequestResponse]
    total: int


class ApproveRequestBody(BaseModel):
    notes: str | None = None


class RejectRequestBody(BaseModel):
    rejected_reason: str = Field(..., min_length=1, max_length=1000)
    notes: str | None = None


class InventoryRequestHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    inventory_request_id: UUID
    previous_status: InventoryRequestStatus | None = None
    new_status: InventoryRequestStatus
    notes: str | None = None
    user_id: UUID | None = None
    created_at: datetime
