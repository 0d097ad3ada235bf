"""Purchase orders: creation, conversion from approved requests, status changes."""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.config import settings
from cafestock.core.errors import (
    FetchError,
    InvalidTransitionError,
    MutationError,
    NotFoundError,
    ValidationError,
)
from cafestock.models.inventory import InventoryItem
from cafestock.models.inventory_request import InventoryRequest, InventoryRequestStatus
from cafestock.models.purchase_order import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from cafestock.models.vendor import VendorProduct
from cafestock.schemas.purchase_order import ConvertRequestsBody, PurchaseOrderCreate
from cafestock.services.inventory_requests import record_status_change
from cafestock.services.notifications import LogNotifier, Notifier, Severity
from cafestock.services.transitions import PURCHASE_ORDER_TRANSITIONS

logger = logging.getLogger(__name__)


def format_po_number(year: int, sequence: int, prefix: str | None = None) -> str:
    """PO-<year>-<sequence>, sequence zero-padded to 3 digits."""
    return f"{prefix or settings.PO_NUMBER_PREFIX}-{year}-{sequence:03d}"


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * unit_price).quantize(Decimal("0.01"))


class PurchaseOrderService:
    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        user_id: UUID | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.user_id = user_id

    async def next_po_number(self, now: datetime | None = None) -> str:
        """Sequence is the count of existing orders plus one.

        Two concurrent creations can compute the same number; the unique
        constraint on po_number turns the loser into a MutationError.
        """
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(select(func.count()).select_from(PurchaseOrder))
        return format_po_number(now.year, result.scalar_one() + 1)

    async def create_purchase_order(
        self, body: PurchaseOrderCreate, now: datetime | None = None
    ) -> PurchaseOrder:
        """Store the order as given; total_amount is not recomputed."""
        now = now or datetime.now(timezone.utc)
        po = PurchaseOrder(
            id=uuid.uuid4(),
            po_number=await self.next_po_number(now),
            outlet_id=body.outlet_id,
            vendor_id=body.vendor_id,
            status=PurchaseOrderStatus.PENDING,
            total_amount=body.total_amount,
            order_date=body.order_date or now,
            expected_delivery_date=body.expected_delivery_date,
            notes=body.notes,
            created_by_user_id=self.user_id,
            items=[
                PurchaseOrderItem(
                    id=uuid.uuid4(),
                    inventory_item_id=item.inventory_item_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=line_total(item.quantity, item.unit_price),
                )
                for item in body.items
            ],
        )
        self.db.add(po)
        await self._commit(po, "Failed to create purchase order.")
        logger.info("Purchase order %s created (%d items)", po.po_number, len(body.items))
        self.notifier.notify(
            "Success", f"Purchase order {po.po_number} created successfully.", Severity.SUCCESS
        )
        return po

    async def convert_requests(
        self, body: ConvertRequestsBody, now: datetime | None = None
    ) -> PurchaseOrder:
        """Build one order from approved requests, priced from the vendor's offers.

        Items without an available offer from this vendor fall back to the
        item's own price_per_unit. Requests for the same item are merged into
        one order line.
        """
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            select(InventoryRequest).where(InventoryRequest.id.in_(body.request_ids))
        )
        requests = list(result.scalars().all())
        missing = set(body.request_ids) - {r.id for r in requests}
        if missing:
            raise NotFoundError(f"Inventory request(s) not found: {', '.join(map(str, missing))}")
        for request in requests:
            if request.status != InventoryRequestStatus.APPROVED:
                raise InvalidTransitionError(
                    "Inventory request", request.status.value, InventoryRequestStatus.CONVERTED_TO_PO.value
                )

        quantities: dict[UUID, int] = {}
        for request in requests:
            quantities[request.inventory_item_id] = (
                quantities.get(request.inventory_item_id, 0) + request.requested_quantity
            )
        prices = await self._unit_prices(body.vendor_id, list(quantities))

        items = [
            PurchaseOrderItem(
                id=uuid.uuid4(),
                inventory_item_id=item_id,
                quantity=quantity,
                unit_price=prices[item_id],
                total_price=line_total(quantity, prices[item_id]),
            )
            for item_id, quantity in quantities.items()
        ]
        po = PurchaseOrder(
            id=uuid.uuid4(),
            po_number=await self.next_po_number(now),
            outlet_id=body.outlet_id,
            vendor_id=body.vendor_id,
            status=PurchaseOrderStatus.PENDING,
            total_amount=sum((i.total_price for i in items), Decimal("0.00")),
            order_date=now,
            expected_delivery_date=body.expected_delivery_date,
            notes=body.notes,
            created_by_user_id=self.user_id,
            items=items,
        )
        self.db.add(po)
        for request in requests:
            self.db.add(
                record_status_change(
                    request,
                    InventoryRequestStatus.CONVERTED_TO_PO,
                    self.user_id,
                    f"Converted to {po.po_number}",
                    now,
                )
            )
            request.purchase_order_id = po.id

        await self._commit(po, "Failed to create purchase order.")
        logger.info("Converted %d request(s) into %s", len(requests), po.po_number)
        self.notifier.notify(
            "Success", f"Purchase order {po.po_number} created successfully.", Severity.SUCCESS
        )
        return po

    async def list_orders(
        self, status: PurchaseOrderStatus | None = None
    ) -> tuple[list[PurchaseOrder], int]:
        query = select(PurchaseOrder)
        if status:
            query = query.where(PurchaseOrder.status == status)
        try:
            total_result = await self.db.execute(select(func.count()).select_from(query.subquery()))
            total = total_result.scalar_one()
            result = await self.db.execute(query.order_by(PurchaseOrder.created_at.desc()))
        except SQLAlchemyError as exc:
            logger.error("Error fetching purchase orders: %s", exc)
            self.notifier.notify("Error", "Failed to fetch purchase orders.", Severity.ERROR)
            raise FetchError("Failed to fetch purchase orders") from exc
        return list(result.scalars().all()), total

    async def get(self, po_id: UUID) -> PurchaseOrder:
        try:
            po = await self.db.get(PurchaseOrder, po_id)
        except SQLAlchemyError as exc:
            logger.error("Error fetching purchase order %s: %s", po_id, exc)
            raise FetchError("Failed to fetch purchase order") from exc
        if po is None:
            raise NotFoundError("Purchase order not found")
        return po

    async def update_status(self, po_id: UUID, status: PurchaseOrderStatus) -> PurchaseOrder:
        po = await self.get(po_id)
        PURCHASE_ORDER_TRANSITIONS.check(po.status, status)
        po.status = status
        po.updated_at = datetime.now(timezone.utc)
        await self._commit(po, "Failed to update purchase order status.")
        self.notifier.notify(
            "Success", f"Purchase order status updated to {status.value}.", Severity.SUCCESS
        )
        return po

    async def _unit_prices(self, vendor_id: UUID, item_ids: list[UUID]) -> dict[UUID, Decimal]:
        offers = await self.db.execute(
            select(VendorProduct).where(
                VendorProduct.vendor_id == vendor_id,
                VendorProduct.inventory_item_id.in_(item_ids),
                VendorProduct.is_available.is_(True),
            )
        )
        prices = {o.inventory_item_id: o.vendor_price for o in offers.scalars().all()}
        unpriced = [item_id for item_id in item_ids if item_id not in prices]
        if unpriced:
            items = await self.db.execute(select(InventoryItem).where(InventoryItem.id.in_(unpriced)))
            for item in items.scalars().all():
                prices[item.id] = item.price_per_unit
        unknown = [item_id for item_id in item_ids if item_id not in prices]
        if unknown:
            raise ValidationError(f"No price available for item(s): {', '.join(map(str, unknown))}")
        return prices

    async def _commit(self, po: PurchaseOrder, failure_message: str) -> None:
        po_number = po.po_number
        try:
            await self.db.commit()
            await self.db.refresh(po)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Purchase order %s write failed: %s", po_number, exc)
            self.notifier.notify("Error", failure_message, Severity.ERROR)
            raise MutationError(failure_message) from exc
