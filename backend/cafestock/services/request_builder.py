"""Request builder: a staff member's cart of replenishment lines.

Each item moves through two stages. ``open`` starts a quantity control at 1
which ``increment``/``decrement`` adjust; ``confirm`` moves the quantity into
the pending set that ``RequestSubmitter`` persists. Quantities are capped at
``reorder_level * REQUEST_CAP_MULTIPLIER``; going over is refused, never
truncated.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from cafestock.core.errors import ValidationError
from cafestock.schemas.inventory_request import (
    BuilderQuantityChange,
    RequestLineItem,
    RequestLineView,
)
from cafestock.services.inventory_store import max_request_quantity
from cafestock.services.notifications import LogNotifier, Notifier, Severity

logger = logging.getLogger(__name__)


class RequestableItem(Protocol):
    id: UUID
    name: str
    unit: str
    quantity: int
    reorder_level: int
    price_per_unit: Decimal


@dataclass
class PendingLine:
    """A confirmed line waiting for submission."""

    item_id: UUID
    name: str
    unit: str
    price_per_unit: Decimal
    on_hand: int
    max_quantity: int
    requested_quantity: int

    @property
    def line_cost(self) -> Decimal:
        return self.price_per_unit * self.requested_quantity

    def to_line_item(self) -> RequestLineItem:
        return RequestLineItem(item_id=self.item_id, requested_quantity=self.requested_quantity)

    def to_view(self) -> RequestLineView:
        return RequestLineView(
            item_id=self.item_id,
            requested_quantity=self.requested_quantity,
            name=self.name,
            unit=self.unit,
            max_quantity=self.max_quantity,
            line_cost=self.line_cost,
        )


class RequestBuilder:
    def __init__(self, notifier: Notifier | None = None):
        self.notifier = notifier or LogNotifier()
        self.request_mode = False
        self._open: dict[UUID, int] = {}
        self._pending: dict[UUID, PendingLine] = {}
        self.errors: dict[UUID, str] = {}

    # ── Request mode ───────────────────────────────

    def set_request_mode(self, enabled: bool) -> bool:
        self.request_mode = enabled
        if not enabled:
            # Open controls are per-screen state; confirmed lines survive
            self._open.clear()
            self.errors.clear()
        return self.request_mode

    def toggle_request_mode(self) -> bool:
        return self.set_request_mode(not self.request_mode)

    # ── Quantity controls ──────────────────────────

    def open(self, item: RequestableItem) -> int:
        if not self.request_mode:
            raise ValidationError("Request mode is off")
        return self._open.setdefault(item.id, 1)

    def quantity(self, item_id: UUID) -> int | None:
        return self._open.get(item_id)

    def open_lines(self) -> list[RequestLineItem]:
        return [
            RequestLineItem(item_id=item_id, requested_quantity=qty)
            for item_id, qty in self._open.items()
        ]

    def increment(self, item: RequestableItem) -> BuilderQuantityChange:
        current = self.open(item)
        max_quantity = max_request_quantity(item)
        if current >= max_quantity:
            message = f"You can request maximum {max_quantity} {item.unit} of {item.name}"
            self.errors[item.id] = message
            self.notifier.notify("Maximum quantity reached", message, Severity.WARNING)
            return BuilderQuantityChange(
                item_id=item.id,
                requested_quantity=current,
                max_quantity=max_quantity,
                capped=True,
                message=message,
            )
        self._open[item.id] = current + 1
        self.errors.pop(item.id, None)
        return BuilderQuantityChange(
            item_id=item.id, requested_quantity=current + 1, max_quantity=max_quantity
        )

    def decrement(self, item: RequestableItem) -> BuilderQuantityChange:
        current = self.open(item)
        if current > 1:
            current -= 1
            self._open[item.id] = current
        self.errors.pop(item.id, None)
        return BuilderQuantityChange(
            item_id=item.id, requested_quantity=current, max_quantity=max_request_quantity(item)
        )

    def cancel(self, item_id: UUID) -> None:
        self._open.pop(item_id, None)
        self.errors.pop(item_id, None)

    # ── Pending set ────────────────────────────────

    def confirm(self, item: RequestableItem, quantity: int) -> bool:
        """Add ``quantity`` to the pending set. Returns False and marks an error when refused.

        Confirming an item that is already pending adds to its quantity; the
        combined quantity is held to the same cap.
        """
        max_quantity = max_request_quantity(item)
        existing = self._pending.get(item.id)
        total = quantity + (existing.requested_quantity if existing else 0)

        if quantity < 1:
            self.errors[item.id] = "Quantity must be at least 1"
            return False
        if total > max_quantity:
            self.errors[item.id] = f"Maximum quantity reached ({max_quantity})"
            logger.info("Refused request for %s: %d exceeds cap %d", item.id, total, max_quantity)
            return False

        if existing:
            existing.requested_quantity = total
        else:
            self._pending[item.id] = PendingLine(
                item_id=item.id,
                name=item.name,
                unit=item.unit,
                price_per_unit=item.price_per_unit,
                on_hand=item.quantity,
                max_quantity=max_quantity,
                requested_quantity=quantity,
            )
        self._open.pop(item.id, None)
        self.errors.pop(item.id, None)
        self.notifier.notify(
            "Added to Request", f"{quantity} {item.unit} of {item.name} added to your request."
        )
        return True

    def pending_lines(self) -> list[PendingLine]:
        return list(self._pending.values())

    def remove(self, item_id: UUID) -> None:
        self._pending.pop(item_id, None)

    def total_cost(self) -> Decimal:
        return sum((line.line_cost for line in self._pending.values()), Decimal("0.00"))

    def clear(self) -> None:
        self._pending.clear()
        self._open.clear()
        self.errors.clear()

    def __len__(self) -> int:
        return len(self._pending)
