"""Status transition tables for requests, purchase orders and deliveries."""

import enum
from typing import Generic, TypeVar

from cafestock.core.errors import InvalidTransitionError
from cafestock.models.delivery import DeliveryStatus
from cafestock.models.inventory_request import InventoryRequestStatus
from cafestock.models.purchase_order import PurchaseOrderStatus

S = TypeVar("S", bound=enum.Enum)


class TransitionTable(Generic[S]):
    """Maps each status to the statuses it may move to next."""

    def __init__(self, entity: str, transitions: dict[S, set[S]]):
        self.entity = entity
        self._transitions = {state: frozenset(targets) for state, targets in transitions.items()}

    def allowed(self, current: S) -> frozenset[S]:
        return self._transitions.get(current, frozenset())

    def can(self, current: S, target: S) -> bool:
        return target in self.allowed(current)

    def is_terminal(self, current: S) -> bool:
        return not self.allowed(current)

    def check(self, current: S, target: S) -> None:
        if not self.can(current, target):
            raise InvalidTransitionError(self.entity, current.value, target.value)

    def as_dict(self) -> dict[str, list[str]]:
        return {
            state.value: sorted(t.value for t in targets)
            for state, targets in self._transitions.items()
        }


REQUEST_TRANSITIONS = TransitionTable(
    "Inventory request",
    {
        InventoryRequestStatus.PENDING: {
            InventoryRequestStatus.APPROVED,
            InventoryRequestStatus.REJECTED,
        },
        InventoryRequestStatus.APPROVED: {InventoryRequestStatus.CONVERTED_TO_PO},
        InventoryRequestStatus.REJECTED: set(),
        InventoryRequestStatus.CONVERTED_TO_PO: set(),
    },
)

PURCHASE_ORDER_TRANSITIONS = TransitionTable(
    "Purchase order",
    {
        PurchaseOrderStatus.PENDING: {PurchaseOrderStatus.SENT, PurchaseOrderStatus.CANCELLED},
        PurchaseOrderStatus.SENT: {PurchaseOrderStatus.CONFIRMED, PurchaseOrderStatus.CANCELLED},
        PurchaseOrderStatus.CONFIRMED: {
            PurchaseOrderStatus.PARTIALLY_DELIVERED,
            PurchaseOrderStatus.DELIVERED,
            PurchaseOrderStatus.CANCELLED,
        },
        PurchaseOrderStatus.PARTIALLY_DELIVERED: {
            PurchaseOrderStatus.DELIVERED,
            PurchaseOrderStatus.CANCELLED,
        },
        PurchaseOrderStatus.DELIVERED: set(),
        PurchaseOrderStatus.CANCELLED: set(),
    },
)

DELIVERY_TRANSITIONS = TransitionTable(
    "Delivery",
    {
        DeliveryStatus.SCHEDULED: {DeliveryStatus.IN_TRANSIT, DeliveryStatus.CANCELLED},
        DeliveryStatus.IN_TRANSIT: {DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED},
        DeliveryStatus.DELIVERED: {DeliveryStatus.RECEIVED, DeliveryStatus.CANCELLED},
        DeliveryStatus.RECEIVED: set(),
        DeliveryStatus.CANCELLED: set(),
    },
)
