"""Roles & permissions - RBAC system."""

import enum
import uuid

from sqlalchemy import ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafestock.db.base import Base
from cafestock.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin, str_enum


class PermissionAction(str, enum.Enum):
    """All permission actions in the system."""
    # Inventory
    INVENTORY_READ = "inventory:read"
    INVENTORY_UPDATE = "inventory:update"
    # Replenishment requests
    REQUEST_CREATE = "request:create"
    REQUEST_APPROVE = "request:approve"
    # Procurement
    PURCHASE_ORDER_MANAGE = "purchase_order:manage"
    DELIVERY_MANAGE = "delivery:manage"
    VENDOR_MANAGE = "vendor:manage"
    # Admin
    ROLE_MANAGE = "role:manage"


class RoleType(str, enum.Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


class UserRole(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One role per user. Upserted by the admin bootstrap."""

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    role: Mapped[RoleType] = mapped_column(
        str_enum(RoleType), default=RoleType.CUSTOMER, nullable=False, index=True
    )

    user = relationship("User", back_populates="role")

    def __repr__(self) -> str:
        return f"<UserRole user={self.user_id} role={self.role}>"
