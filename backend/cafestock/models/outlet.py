"""Outlet model - a café location that orders and receives stock."""

import enum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafestock.db.base import Base
from cafestock.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin, str_enum


class OutletStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Outlet(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "outlets"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[OutletStatus] = mapped_column(
        str_enum(OutletStatus), default=OutletStatus.ACTIVE, nullable=False
    )

    purchase_orders = relationship("PurchaseOrder", back_populates="outlet")
    deliveries = relationship("Delivery", back_populates="outlet")

    def __repr__(self) -> str:
        return f"<Outlet {self.name}>"
