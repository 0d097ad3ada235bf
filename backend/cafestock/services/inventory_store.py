"""Inventory store: authoritative stock levels and reorder thresholds."""

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.config import settings
from cafestock.core.errors import FetchError, MutationError, NotFoundError, ValidationError
from cafestock.models.inventory import InventoryItem
from cafestock.schemas.inventory import (
    InventoryCategoryGroup,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemView,
)
from cafestock.services.notifications import LogNotifier, Notifier, Severity
from cafestock.services.record_cache import RecordCache

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


class StockLevels(Protocol):
    quantity: int
    reorder_level: int


# ── Derived values ─────────────────────────────────

def stock_status(item: StockLevels) -> bool:
    """True when the item needs reordering (quantity at or below reorder level)."""
    return item.quantity <= item.reorder_level


def stock_percentage(item: StockLevels) -> float:
    """Display-only fill ratio against twice the reorder level, clamped to [0, 100]."""
    capacity = item.reorder_level * 2
    if capacity <= 0:
        return 100.0 if item.quantity > 0 else 0.0
    return max(0.0, min(100.0, item.quantity / capacity * 100))


def max_request_quantity(item: StockLevels) -> int:
    """Hard ceiling for a single replenishment request."""
    return item.reorder_level * settings.REQUEST_CAP_MULTIPLIER


def to_view(item: InventoryItem | InventoryItemResponse) -> InventoryItemView:
    record = item if isinstance(item, InventoryItemResponse) else InventoryItemResponse.model_validate(item)
    return InventoryItemView(
        **record.model_dump(),
        stock_percentage=stock_percentage(record),
        max_request_quantity=max_request_quantity(record),
    )


def group_by_category(items: Iterable[InventoryItemResponse]) -> list[InventoryCategoryGroup]:
    groups: dict[str, list[InventoryItemView]] = defaultdict(list)
    for item in items:
        groups[item.category or UNCATEGORIZED].append(to_view(item))
    return [InventoryCategoryGroup(category=name, items=groups[name]) for name in sorted(groups)]


class InventoryStore:
    """Reads and writes inventory rows; keeps a timestamp-merged local copy."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        cache: RecordCache[InventoryItemResponse] | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.cache = cache if cache is not None else RecordCache()

    async def list_items(self, search: str | None = None) -> list[InventoryItemResponse]:
        """All items ordered by name. Raises FetchError; not retried."""
        query = select(InventoryItem).order_by(InventoryItem.name)
        if search:
            query = query.where(
                InventoryItem.name.ilike(f"%{search}%") | InventoryItem.category.ilike(f"%{search}%")
            )
        try:
            result = await self.db.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching inventory: %s", exc)
            self.notifier.notify(
                "Error", "Failed to fetch inventory data. Please try again.", Severity.ERROR
            )
            raise FetchError("Failed to fetch inventory data") from exc

        items = [InventoryItemResponse.model_validate(row) for row in rows]
        if not search:
            self.cache.sync(items)
        logger.debug("Fetched %d inventory items", len(items))
        return items

    async def low_stock(self) -> list[InventoryItemResponse]:
        """Items at or below their reorder level, lowest stock first."""
        query = (
            select(InventoryItem)
            .where(InventoryItem.quantity <= InventoryItem.reorder_level)
            .order_by(InventoryItem.quantity.asc())
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            logger.error("Error fetching low stock items: %s", exc)
            raise FetchError("Failed to fetch low stock items") from exc
        return [InventoryItemResponse.model_validate(row) for row in result.scalars().all()]

    async def get(self, item_id: UUID) -> InventoryItem:
        try:
            item = await self.db.get(InventoryItem, item_id)
        except SQLAlchemyError as exc:
            logger.error("Error fetching inventory item %s: %s", item_id, exc)
            raise FetchError("Failed to fetch inventory item") from exc
        if item is None:
            raise NotFoundError("Inventory item not found")
        return item

    async def update_quantity(self, item_id: UUID, new_quantity: int) -> bool:
        """Set an absolute quantity. Returns False on failure; local copy is left untouched."""
        if new_quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        try:
            item = await self.db.get(InventoryItem, item_id)
            if item is None:
                self.notifier.notify("Update Failed", "Inventory item not found.", Severity.ERROR)
                return False
            now = datetime.now(timezone.utc)
            item.quantity = new_quantity
            item.updated_at = now
            item.last_restocked = now
            await self.db.commit()
            await self.db.refresh(item)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Error updating inventory item %s: %s", item_id, exc)
            self.notifier.notify("Update Failed", "Failed to update inventory.", Severity.ERROR)
            return False

        self.cache.merge(InventoryItemResponse.model_validate(item))
        logger.info("Inventory item %s set to quantity %d", item_id, new_quantity)
        self.notifier.notify(
            "Inventory Updated", "Successfully updated inventory item.", Severity.SUCCESS
        )
        return True

    async def create_item(self, data: InventoryItemCreate) -> InventoryItemResponse:
        item = InventoryItem(id=uuid.uuid4(), **data.model_dump())
        self.db.add(item)
        try:
            await self.db.commit()
            await self.db.refresh(item)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Error creating inventory item %s: %s", data.name, exc)
            self.notifier.notify("Creation Failed", "Failed to create inventory item.", Severity.ERROR)
            raise MutationError("Failed to create inventory item") from exc

        record = InventoryItemResponse.model_validate(item)
        self.cache.merge(record)
        self.notifier.notify(
            "Item Created", f"Successfully added {data.name} to inventory.", Severity.SUCCESS
        )
        return record
