"""Vendor & VendorProduct models."""

import enum
import uuid
from decimal import Decimal

from sqlalchemy import String, Text, Integer, Numeric, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafestock.db.base import Base
from cafestock.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin, str_enum


class VendorStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Vendor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vendors"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_person: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20))
    address: Mapped[str | None] = mapped_column(Text)
    status: Mapped[VendorStatus] = mapped_column(
        str_enum(VendorStatus), default=VendorStatus.ACTIVE, nullable=False
    )

    products = relationship("VendorProduct", back_populates="vendor", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Vendor {self.name}>"


class VendorProduct(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A vendor's offer for one inventory item."""

    __tablename__ = "vendor_products"
    __table_args__ = (
        UniqueConstraint("vendor_id", "inventory_item_id", name="uq_vendor_product_item"),
    )

    vendor_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    minimum_order_quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    lead_time_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("inventory.id", ondelete="CASCADE"), nullable=False, index=True
    )

    vendor = relationship("Vendor", back_populates="products")
    inventory_item = relationship("InventoryItem", back_populates="vendor_products")

    def __repr__(self) -> str:
        return f"<VendorProduct vendor={self.vendor_id} item={self.inventory_item_id} price={self.vendor_price}>"
