from cafestock.schemas.inventory import (
    InventoryItemCreate, InventoryItemResponse, InventoryItemView, InventoryListResponse,
)
from cafestock.schemas.inventory_request import (
    RequestLineItem, InventoryRequestResponse, SubmitRequestResult,
)
from cafestock.schemas.vendor import (
    VendorCreate, VendorUpdate, VendorResponse, VendorProductResponse,
)
from cafestock.schemas.purchase_order import (
    PurchaseOrderCreate, PurchaseOrderResponse,
)
from cafestock.schemas.outlet import OutletCreate, OutletResponse
from cafestock.schemas.delivery import (
    DeliveryResponse, ReconciliationReport,
)

__all__ = [
    "InventoryItemCreate", "InventoryItemResponse", "InventoryItemView", "InventoryListResponse",
    "RequestLineItem", "InventoryRequestResponse", "SubmitRequestResult",
    "VendorCreate", "VendorUpdate", "VendorResponse", "VendorProductResponse",
    "PurchaseOrderCreate", "PurchaseOrderResponse",
    "DeliveryResponse", "ReconciliationReport",
    "OutletCreate", "OutletResponse",
]
