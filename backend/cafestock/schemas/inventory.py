"""Inventory schemas for request/response."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class InventoryItemBase(BaseModel):
    """Base inventory schema with common fields."""
    name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=0, description="Current stock quantity")
    reorder_level: int = Field(..., ge=0, description="Low stock at or below this")
    price_per_unit: Decimal = Field(..., ge=0, decimal_places=2)
    unit: str = Field(..., min_length=1, max_length=50)
    category: str | None = Field(None, max_length=100)


class InventoryItemCreate(InventoryItemBase):
    pass


class InventoryQuantityUpdate(BaseModel):
    """Absolute quantity, not a delta."""
    quantity: int = Field(..., ge=0)


class InventoryItemResponse(InventoryItemBase):
    """Validated record as read from the backing store."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    is_low_stock: bool
    last_restocked: datetime | None = None
    created_at: datetime
    updated_at: datetime


class InventoryItemView(InventoryItemResponse):
    """Item plus display-only derived values."""
    stock_percentage: float = Field(..., ge=0, le=100)
    max_request_quantity: int


class InventoryListResponse(BaseModel):
    items: list[InventoryItemView]
    total: int


class LowStockResponse(BaseModel):
    """Response for low stock alerts."""
    items: list[InventoryItemView]
    count: int


class InventoryCategoryGroup(BaseModel):
    category: str
    items: list[InventoryItemView]
