"""Delivery schemas for API request/response."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cafestock.models.delivery import DeliveryStatus


class DeliveryCreate(BaseModel):
    purchase_order_id: UUID
    delivery_date: datetime | None = None
    tracking_number: str | None = Field(None, max_length=100)
    notes: str | None = None


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus


class DeliveryItemQuantities(BaseModel):
    delivery_item_id: UUID
    delivered_quantity: int | None = Field(None, ge=0)
    received_quantity: int | None = Field(None, ge=0)


class DeliveryItemsUpdate(BaseModel):
    items: list[DeliveryItemQuantities] = Field(..., min_length=1)


class DeliveryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    delivery_id: UUID
    inventory_item_id: UUID
    ordered_quantity: int
    delivered_quantity: int
    received_quantity: int
    unit_price: Decimal


class DeliveryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    delivery_number: str
    purchase_order_id: UUID
    vendor_id: UUID
    outlet_id: UUID
    status: DeliveryStatus
    delivery_date: datetime | None = None
    received_date: datetime | None = None
    tracking_number: str | None = None
    notes: str | None = None
    stock_applied_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    items: list[DeliveryItemResponse] = []


class DeliveryListResponse(BaseModel):
    items: list[DeliveryResponse]
    total: int


class DiscrepancyLine(BaseModel):
    delivery_item_id: UUID
    inventory_item_id: UUID
    ordered_quantity: int
    delivered_quantity: int
    received_quantity: int
    short_delivered: int
    short_received: int


class ReconciliationReport(BaseModel):
    """Read-only comparison; nothing here is resolved automatically."""
    delivery_id: UUID
    delivery_number: str
    status: DeliveryStatus
    balanced: bool
    discrepancies: list[DiscrepancyLine]
