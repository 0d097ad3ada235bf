"""Inventory replenishment request & status history models."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafestock.db.base import Base
from cafestock.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin, str_enum


class InventoryRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED_TO_PO = "converted_to_po"


class InventoryRequest(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "inventory_requests"
    __table_args__ = (
        Index("ix_inventory_requests_status_created", "status", "created_at"),
    )

    staff_entered_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    requested_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    status: Mapped[InventoryRequestStatus] = mapped_column(
        str_enum(InventoryRequestStatus), default=InventoryRequestStatus.PENDING, nullable=False
    )
    rejected_reason: Mapped[str | None] = mapped_column(Text)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    # Suppresses duplicate rows from repeated submissions of the same line
    idempotency_key: Mapped[str | None] = mapped_column(String(64), unique=True, index=True)

    # Foreign keys
    inventory_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("inventory.id", ondelete="CASCADE"), nullable=False, index=True
    )
    requested_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    approved_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    purchase_order_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("purchase_orders.id", ondelete="SET NULL"), index=True
    )

    # Relationships
    inventory_item = relationship("InventoryItem", back_populates="requests", lazy="selectin")
    purchase_order = relationship("PurchaseOrder", back_populates="requests")
    history = relationship(
        "InventoryRequestHistory",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="InventoryRequestHistory.created_at",
    )

    def __repr__(self) -> str:
        return f"<InventoryRequest item={self.inventory_item_id} qty={self.requested_quantity} {self.status}>"


class InventoryRequestHistory(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "inventory_request_history"

    previous_status: Mapped[InventoryRequestStatus | None] = mapped_column(
        str_enum(InventoryRequestStatus)
    )
    new_status: Mapped[InventoryRequestStatus] = mapped_column(
        str_enum(InventoryRequestStatus), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    inventory_request_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("inventory_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )

    request = relationship("InventoryRequest", back_populates="history")
