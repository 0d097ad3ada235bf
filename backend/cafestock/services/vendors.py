"""Vendor directory: vendors, their per-item offers, and price lookups."""

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cafestock.core.errors import FetchError, MutationError, NotFoundError
from cafestock.models.vendor import Vendor, VendorProduct
from cafestock.schemas.vendor import (
    VendorCreate,
    VendorProductCreate,
    VendorProductResponse,
    VendorResponse,
    VendorUpdate,
)
from cafestock.services.notifications import LogNotifier, Notifier, Severity
from cafestock.services.record_cache import RecordCache

logger = logging.getLogger(__name__)


def rank_offers(
    offers: list[VendorProductResponse], inventory_item_id: UUID
) -> list[VendorProductResponse]:
    """Available offers for one item, cheapest first."""
    return sorted(
        (o for o in offers if o.inventory_item_id == inventory_item_id and o.is_available),
        key=lambda o: o.vendor_price,
    )


class VendorDirectory:
    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        vendors: RecordCache[VendorResponse] | None = None,
        products: RecordCache[VendorProductResponse] | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.vendors = vendors if vendors is not None else RecordCache()
        self.products = products if products is not None else RecordCache()

    # ── Reads ──────────────────────────────────────

    async def list_vendors(self) -> list[VendorResponse]:
        try:
            result = await self.db.execute(select(Vendor).order_by(Vendor.name))
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching vendors: %s", exc)
            self.notifier.notify("Error", "Failed to fetch vendors.", Severity.ERROR)
            raise FetchError("Failed to fetch vendors") from exc
        vendors = [VendorResponse.model_validate(v) for v in rows]
        self.vendors.sync(vendors)
        return vendors

    async def list_vendor_products(self) -> list[VendorProductResponse]:
        try:
            result = await self.db.execute(
                select(VendorProduct).order_by(VendorProduct.created_at.desc())
            )
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching vendor products: %s", exc)
            raise FetchError("Failed to fetch vendor products") from exc
        products = [VendorProductResponse.model_validate(p) for p in rows]
        self.products.sync(products)
        return products

    def get_vendors_by_product(self, inventory_item_id: UUID) -> list[VendorProductResponse]:
        """Filter and sort the already-loaded offers; no database round trip."""
        return rank_offers(self.products.values(), inventory_item_id)

    # ── Writes ─────────────────────────────────────

    async def create_vendor(self, data: VendorCreate) -> VendorResponse:
        vendor = Vendor(id=uuid.uuid4(), **data.model_dump())
        self.db.add(vendor)
        await self._commit(vendor, "Failed to create vendor.")
        record = VendorResponse.model_validate(vendor)
        self.vendors.merge(record)
        self.notifier.notify("Success", "Vendor created successfully.", Severity.SUCCESS)
        return record

    async def update_vendor(self, vendor_id: UUID, updates: VendorUpdate) -> VendorResponse:
        """Partial update; the stored row is merged back into the local cache by id."""
        try:
            vendor = await self.db.get(Vendor, vendor_id)
        except SQLAlchemyError as exc:
            logger.error("Error fetching vendor %s: %s", vendor_id, exc)
            raise FetchError("Failed to fetch vendor") from exc
        if vendor is None:
            raise NotFoundError("Vendor not found")

        for field, value in updates.model_dump(exclude_unset=True).items():
            setattr(vendor, field, value)
        vendor.updated_at = datetime.now(timezone.utc)
        await self._commit(vendor, "Failed to update vendor.")

        record = VendorResponse.model_validate(vendor)
        self.vendors.merge(record)
        self.notifier.notify("Success", "Vendor updated successfully.", Severity.SUCCESS)
        return record

    async def create_vendor_product(self, data: VendorProductCreate) -> VendorProductResponse:
        product = VendorProduct(id=uuid.uuid4(), **data.model_dump())
        self.db.add(product)
        await self._commit(product, "Failed to add vendor product.")
        record = VendorProductResponse.model_validate(product)
        self.products.merge(record)
        self.notifier.notify("Success", "Vendor product added successfully.", Severity.SUCCESS)
        return record

    async def _commit(self, instance, failure_message: str) -> None:
        try:
            await self.db.commit()
            await self.db.refresh(instance)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Vendor directory write failed: %s", exc)
            self.notifier.notify("Error", failure_message, Severity.ERROR)
            raise MutationError(failure_message) from exc
