from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from cafestock.models.vendor import VendorStatus


# ── Vendor ──
class VendorBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    address: str | None = None
    status: VendorStatus = VendorStatus.ACTIVE


class VendorCreate(VendorBase):
    pass


class VendorUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    address: str | None = None
    status: VendorStatus | None = None


class VendorResponse(VendorBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    # Loose on read: legacy rows may hold addresses EmailStr would reject
    email: str | None = None
    created_at: datetime
    updated_at: datetime


# ── Vendor product ──
class VendorProductBase(BaseModel):
    vendor_id: UUID
    inventory_item_id: UUID
    vendor_price: Decimal = Field(..., ge=0, decimal_places=2)
    minimum_order_quantity: int = Field(1, ge=1)
    lead_time_days: int = Field(0, ge=0)
    is_available: bool = True


class VendorProductCreate(VendorProductBase):
    pass


class VendorProductResponse(VendorProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
