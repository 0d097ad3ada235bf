"""Deliveries: tracking a purchase order from scheduling through receipt."""

import logging
import uuid
from datetime import datetime, timezone
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
from cafestock.models.delivery import Delivery, DeliveryItem, DeliveryStatus
from cafestock.models.inventory import InventoryItem
from cafestock.models.purchase_order import PurchaseOrder, PurchaseOrderStatus
from cafestock.schemas.delivery import (
    DeliveryCreate,
    DeliveryItemQuantities,
    DiscrepancyLine,
    ReconciliationReport,
)
from cafestock.services.notifications import LogNotifier, Notifier, Severity
from cafestock.services.transitions import DELIVERY_TRANSITIONS

logger = logging.getLogger(__name__)


def format_delivery_number(year: int, sequence: int, prefix: str | None = None) -> str:
    return f"{prefix or settings.DELIVERY_NUMBER_PREFIX}-{year}-{sequence:03d}"


def apply_status(delivery: Delivery, status: DeliveryStatus, now: datetime | None = None) -> None:
    """Move to ``status``. Only ``received`` has a side effect: it stamps received_date."""
    DELIVERY_TRANSITIONS.check(delivery.status, status)
    now = now or datetime.now(timezone.utc)
    delivery.status = status
    delivery.updated_at = now
    if status == DeliveryStatus.RECEIVED:
        delivery.received_date = now


def reconciliation_report(delivery: Delivery) -> ReconciliationReport:
    """Compare ordered, delivered and received counts per line.

    Discrepancies are listed for manual review only; nothing is adjusted.
    """
    discrepancies = []
    for item in delivery.items:
        short_delivered = item.ordered_quantity - item.delivered_quantity
        short_received = item.delivered_quantity - item.received_quantity
        if short_delivered or short_received:
            discrepancies.append(
                DiscrepancyLine(
                    delivery_item_id=item.id,
                    inventory_item_id=item.inventory_item_id,
                    ordered_quantity=item.ordered_quantity,
                    delivered_quantity=item.delivered_quantity,
                    received_quantity=item.received_quantity,
                    short_delivered=short_delivered,
                    short_received=short_received,
                )
            )
    return ReconciliationReport(
        delivery_id=delivery.id,
        delivery_number=delivery.delivery_number,
        status=delivery.status,
        balanced=not discrepancies,
        discrepancies=discrepancies,
    )


class DeliveryService:
    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        user_id: UUID | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.user_id = user_id

    # ── Reads ──────────────────────────────────────

    async def list_deliveries(
        self,
        status: DeliveryStatus | None = None,
        purchase_order_id: UUID | None = None,
    ) -> tuple[list[Delivery], int]:
        query = select(Delivery)
        if status:
            query = query.where(Delivery.status == status)
        if purchase_order_id:
            query = query.where(Delivery.purchase_order_id == purchase_order_id)
        try:
            total_result = await self.db.execute(select(func.count()).select_from(query.subquery()))
            total = total_result.scalar_one()
            result = await self.db.execute(query.order_by(Delivery.created_at.desc()))
        except SQLAlchemyError as exc:
            logger.error("Error fetching deliveries: %s", exc)
            self.notifier.notify("Error", "Failed to fetch deliveries.", Severity.ERROR)
            raise FetchError("Failed to fetch deliveries") from exc
        return list(result.scalars().all()), total

    async def get(self, delivery_id: UUID) -> Delivery:
        try:
            delivery = await self.db.get(Delivery, delivery_id)
        except SQLAlchemyError as exc:
            logger.error("Error fetching delivery %s: %s", delivery_id, exc)
            raise FetchError("Failed to fetch delivery") from exc
        if delivery is None:
            raise NotFoundError("Delivery not found")
        return delivery

    async def reconciliation_report(self, delivery_id: UUID) -> ReconciliationReport:
        return reconciliation_report(await self.get(delivery_id))

    # ── Writes ─────────────────────────────────────

    async def create_delivery(
        self, body: DeliveryCreate, now: datetime | None = None
    ) -> Delivery:
        """Schedule a delivery for a purchase order, one line per order item."""
        now = now or datetime.now(timezone.utc)
        try:
            po = await self.db.get(PurchaseOrder, body.purchase_order_id)
            count_result = await self.db.execute(select(func.count()).select_from(Delivery))
        except SQLAlchemyError as exc:
            logger.error("Error preparing delivery for %s: %s", body.purchase_order_id, exc)
            raise FetchError("Failed to fetch purchase order") from exc
        if po is None:
            raise NotFoundError("Purchase order not found")
        if po.status in (PurchaseOrderStatus.CANCELLED, PurchaseOrderStatus.DELIVERED):
            raise ValidationError(f"Cannot schedule a delivery for a {po.status.value} purchase order")

        delivery = Delivery(
            id=uuid.uuid4(),
            delivery_number=format_delivery_number(now.year, count_result.scalar_one() + 1),
            purchase_order_id=po.id,
            vendor_id=po.vendor_id,
            outlet_id=po.outlet_id,
            status=DeliveryStatus.SCHEDULED,
            delivery_date=body.delivery_date,
            tracking_number=body.tracking_number,
            notes=body.notes,
            items=[
                DeliveryItem(
                    id=uuid.uuid4(),
                    inventory_item_id=item.inventory_item_id,
                    ordered_quantity=item.quantity,
                    delivered_quantity=0,
                    received_quantity=0,
                    unit_price=item.unit_price,
                )
                for item in po.items
            ],
        )
        self.db.add(delivery)
        await self._commit(delivery, "Failed to create delivery.")
        logger.info("Delivery %s scheduled for %s", delivery.delivery_number, po.po_number)
        self.notifier.notify(
            "Success", f"Delivery {delivery.delivery_number} scheduled.", Severity.SUCCESS
        )
        return delivery

    async def update_delivery_status(
        self, delivery_id: UUID, status: DeliveryStatus, now: datetime | None = None
    ) -> Delivery:
        delivery = await self.get(delivery_id)
        apply_status(delivery, status, now)
        await self._commit(delivery, "Failed to update delivery status.")
        logger.info("Delivery %s is now %s", delivery.delivery_number, status.value)
        self.notifier.notify("Success", "Delivery status updated successfully.", Severity.SUCCESS)
        return delivery

    async def record_item_quantities(
        self, delivery_id: UUID, updates: list[DeliveryItemQuantities]
    ) -> Delivery:
        """Record delivered/received counts. Mismatches are allowed and left for review."""
        delivery = await self.get(delivery_id)
        if delivery.status == DeliveryStatus.CANCELLED:
            raise ValidationError("Cannot record quantities on a cancelled delivery")
        if delivery.stock_applied_at is not None:
            raise ValidationError("Received stock was already applied for this delivery")

        lines = {item.id: item for item in delivery.items}
        for update in updates:
            line = lines.get(update.delivery_item_id)
            if line is None:
                raise NotFoundError(f"Delivery item {update.delivery_item_id} not found")
            if update.delivered_quantity is not None:
                line.delivered_quantity = update.delivered_quantity
            if update.received_quantity is not None:
                line.received_quantity = update.received_quantity
        delivery.updated_at = datetime.now(timezone.utc)

        await self._commit(delivery, "Failed to update delivery items.")
        self.notifier.notify("Success", "Delivery quantities recorded.", Severity.SUCCESS)
        return delivery

    async def apply_received_stock(
        self, delivery_id: UUID, now: datetime | None = None
    ) -> Delivery:
        """Add each line's received quantity to inventory. Allowed once, after receipt."""
        delivery = await self.get(delivery_id)
        if delivery.status != DeliveryStatus.RECEIVED:
            raise InvalidTransitionError(
                "Delivery stock", delivery.status.value, "applied"
            )
        if delivery.stock_applied_at is not None:
            raise ValidationError("Received stock was already applied for this delivery")

        now = now or datetime.now(timezone.utc)
        try:
            for line in delivery.items:
                if line.received_quantity <= 0:
                    continue
                item = await self.db.get(InventoryItem, line.inventory_item_id)
                if item is None:
                    raise NotFoundError(f"Inventory item {line.inventory_item_id} not found")
                item.quantity += line.received_quantity
                item.last_restocked = now
                item.updated_at = now
        except SQLAlchemyError as exc:
            logger.error("Error loading inventory for delivery %s: %s", delivery_id, exc)
            raise FetchError("Failed to fetch inventory") from exc
        delivery.stock_applied_at = now
        delivery.updated_at = now

        await self._commit(delivery, "Failed to apply received stock.")
        logger.info("Received stock applied for delivery %s", delivery.delivery_number)
        self.notifier.notify(
            "Stock Updated",
            f"Inventory updated from delivery {delivery.delivery_number}.",
            Severity.SUCCESS,
        )
        return delivery

    async def _commit(self, delivery: Delivery, failure_message: str) -> None:
        delivery_number = delivery.delivery_number
        try:
            await self.db.commit()
            await self.db.refresh(delivery)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Delivery %s write failed: %s", delivery_number, exc)
            self.notifier.notify("Error", failure_message, Severity.ERROR)
            raise MutationError(failure_message) from exc
