"""Unit tests for the vendor directory."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from cafestock.core.errors import NotFoundError
from cafestock.models.vendor import Vendor, VendorProduct, VendorStatus
from cafestock.schemas.vendor import VendorProductResponse, VendorUpdate
from cafestock.services.vendors import VendorDirectory, rank_offers

from conftest import NOW, scalars_result


def _offer(item_id, price: str, available: bool = True) -> VendorProductResponse:
    return VendorProductResponse(
        id=uuid.uuid4(),
        vendor_id=uuid.uuid4(),
        inventory_item_id=item_id,
        vendor_price=Decimal(price),
        minimum_order_quantity=1,
        lead_time_days=2,
        is_available=available,
        created_at=NOW,
        updated_at=NOW,
    )


def test_rank_offers_cheapest_available_first():
    item_id = uuid.uuid4()
    offers = [
        _offer(item_id, "3.10"),
        _offer(item_id, "1.90", available=False),
        _offer(item_id, "2.40"),
        _offer(uuid.uuid4(), "0.50"),
    ]

    ranked = rank_offers(offers, item_id)

    assert [o.vendor_price for o in ranked] == [Decimal("2.40"), Decimal("3.10")]


@pytest.mark.asyncio
async def test_get_vendors_by_product_uses_loaded_offers(mock_db):
    item_id = uuid.uuid4()
    rows = [
        VendorProduct(
            id=uuid.uuid4(), vendor_id=uuid.uuid4(), inventory_item_id=item_id,
            vendor_price=Decimal(price), minimum_order_quantity=1, lead_time_days=1,
            is_available=True, created_at=NOW, updated_at=NOW,
        )
        for price in ("4.00", "3.50")
    ]
    mock_db.execute.return_value = scalars_result(rows)
    directory = VendorDirectory(mock_db)
    await directory.list_vendor_products()
    mock_db.execute.reset_mock()

    ranked = directory.get_vendors_by_product(item_id)

    assert [o.vendor_price for o in ranked] == [Decimal("3.50"), Decimal("4.00")]
    mock_db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_update_vendor_merges_into_cache(mock_db):
    vendor = Vendor(
        id=uuid.uuid4(), name="Bean Bros", status=VendorStatus.ACTIVE,
        created_at=NOW, updated_at=NOW,
    )
    mock_db.get.return_value = vendor
    directory = VendorDirectory(mock_db)

    record = await directory.update_vendor(vendor.id, VendorUpdate(phone="555-0101"))

    assert record.phone == "555-0101"
    assert record.name == "Bean Bros"
    assert directory.vendors.get(vendor.id).phone == "555-0101"
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_stale_refetch_does_not_overwrite_newer_update(mock_db):
    vendor = Vendor(
        id=uuid.uuid4(), name="Bean Bros", status=VendorStatus.ACTIVE,
        created_at=NOW, updated_at=NOW,
    )
    mock_db.get.return_value = vendor
    directory = VendorDirectory(mock_db)
    await directory.update_vendor(vendor.id, VendorUpdate(name="Bean Brothers"))

    stale = Vendor(
        id=vendor.id, name="Bean Bros", status=VendorStatus.ACTIVE,
        created_at=NOW, updated_at=NOW - timedelta(minutes=1),
    )
    mock_db.execute.return_value = scalars_result([stale])
    await directory.list_vendors()

    assert directory.vendors.get(vendor.id).name == "Bean Brothers"


@pytest.mark.asyncio
async def test_update_unknown_vendor(mock_db):
    mock_db.get.return_value = None

    with pytest.raises(NotFoundError):
        await VendorDirectory(mock_db).update_vendor(uuid.uuid4(), VendorUpdate(name="X"))
