"""Delivery & DeliveryItem models."""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafestock.db.base import Base
from cafestock.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin, str_enum


class DeliveryStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class Delivery(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "deliveries"

    delivery_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    status: Mapped[DeliveryStatus] = mapped_column(
        str_enum(DeliveryStatus), default=DeliveryStatus.SCHEDULED, nullable=False, index=True
    )
    delivery_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    received_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    tracking_number: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)
    # Set once received quantities have been added to inventory
    stock_applied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Foreign keys
    purchase_order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("purchase_orders.id"), nullable=False, index=True
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("vendors.id"), nullable=False
    )
    outlet_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("outlets.id"), nullable=False
    )

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="deliveries", lazy="selectin")
    vendor = relationship("Vendor", lazy="selectin")
    outlet = relationship("Outlet", back_populates="deliveries", lazy="selectin")
    items = relationship(
        "DeliveryItem", back_populates="delivery", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Delivery {self.delivery_number} {self.status}>"


class DeliveryItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "delivery_items"

    ordered_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    delivered_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    received_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    delivery_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("deliveries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("inventory.id"), nullable=False
    )

    delivery = relationship("Delivery", back_populates="items")
    inventory_item = relationship("InventoryItem", lazy="selectin")

    def __repr__(self) -> str:
        return f"<DeliveryItem item={self.inventory_item_id} ordered={self.ordered_quantity}>"
