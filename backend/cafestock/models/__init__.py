"""SQLAlchemy models for CafeStock."""

from cafestock.models.outlet import Outlet, OutletStatus
from cafestock.models.user import User
from cafestock.models.role import UserRole, RoleType, PermissionAction
from cafestock.models.inventory import InventoryItem
from cafestock.models.inventory_request import (
    InventoryRequest,
    InventoryRequestHistory,
    InventoryRequestStatus,
)
from cafestock.models.vendor import Vendor, VendorProduct, VendorStatus
from cafestock.models.purchase_order import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from cafestock.models.delivery import Delivery, DeliveryItem, DeliveryStatus

__all__ = [
    "Outlet",
    "OutletStatus",
    "User",
    "UserRole",
    "RoleType",
    "PermissionAction",
    "InventoryItem",
    "InventoryRequest",
    "InventoryRequestHistory",
    "InventoryRequestStatus",
    "Vendor",
    "VendorProduct",
    "VendorStatus",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "PurchaseOrderStatus",
    "Delivery",
    "DeliveryItem",
    "DeliveryStatus",
]
