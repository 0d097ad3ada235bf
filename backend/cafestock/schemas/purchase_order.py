"""Purchase order schemas for API request/response."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cafestock.models.purchase_order import PurchaseOrderStatus


class PurchaseOrderItemCreate(BaseModel):
    inventory_item_id: UUID
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)


class PurchaseOrderItemResponse(PurchaseOrderItemCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    purchase_order_id: UUID
    total_price: Decimal


class PurchaseOrderCreate(BaseModel):
    """total_amount is supplied by the caller; it is stored as given."""
    outlet_id: UUID
    vendor_id: UUID
    total_amount: Decimal = Field(..., ge=0, decimal_places=2)
    order_date: datetime | None = None
    expected_delivery_date: datetime | None = None
    notes: str | None = None
    items: list[PurchaseOrderItemCreate] = Field(..., min_length=1)


class ConvertRequestsBody(BaseModel):
    request_ids: list[UUID] = Field(..., min_length=1)
    outlet_id: UUID
    vendor_id: UUID
    expected_delivery_date: datetime | None = None
    notes: str | None = None


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus


class PurchaseOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    po_number: str
    outlet_id: UUID
    vendor_id: UUID
    status: PurchaseOrderStatus
    total_amount: Decimal
    order_date: datetime
    expected_delivery_date: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    items: list[PurchaseOrderItemResponse] = []


class PurchaseOrderListResponse(BaseModel):
    items: list[PurchaseOrderResponse]
    total: int
