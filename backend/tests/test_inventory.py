"""Unit tests for the inventory store and inventory endpoints."""

import typing
import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from cafestock.core.errors import FetchError, NotFoundError, ValidationError
from cafestock.schemas.inventory import InventoryItemCreate, InventoryItemResponse
from cafestock.services.inventory_store import (
    InventoryStore,
    group_by_category,
    max_request_quantity,
    stock_percentage,
    stock_status,
)
from cafestock.services.notifications import RecordingNotifier, Severity

from conftest import NOW, scalars_result


def levels(quantity: int, reorder_level: int):
    return SimpleNamespace(quantity=quantity, reorder_level=reorder_level)


# ── Derived values ────────────────────────────────

def test_inventory_is_low_stock_property(make_item):
    """InventoryItem.is_low_stock is True when quantity <= reorder level."""
    item = make_item(quantity=3, reorder_level=5)
    assert item.is_low_stock is True

    item.quantity = 15
    assert item.is_low_stock is False

    item.quantity = 5  # exactly at reorder level
    assert item.is_low_stock is True


def test_stock_status_matches_threshold():
    assert stock_status(levels(5, 5)) is True
    assert stock_status(levels(6, 5)) is False
    assert stock_status(levels(0, 0)) is True


@pytest.mark.parametrize(
    "quantity, reorder_level, expected",
    [
        (5, 5, 50.0),
        (10, 5, 100.0),
        (40, 5, 100.0),  # clamped above
        (0, 5, 0.0),
        (3, 0, 100.0),  # no reorder level: anything in stock reads full
        (0, 0, 0.0),
    ],
)
def test_stock_percentage_is_clamped(quantity, reorder_level, expected):
    assert stock_percentage(levels(quantity, reorder_level)) == expected


def test_max_request_quantity_is_three_times_reorder_level():
    assert max_request_quantity(levels(10, 5)) == 15
    assert max_request_quantity(levels(10, 0)) == 0


def test_group_by_category_uses_uncategorized(make_item):
    items = [
        InventoryItemResponse.model_validate(make_item(name="Oat Milk", category="Dairy")),
        InventoryItemResponse.model_validate(make_item(name="Napkins", category=None)),
        InventoryItemResponse.model_validate(make_item(name="Cream", category="Dairy")),
    ]

    groups = group_by_category(items)

    assert [g.category for g in groups] == ["Dairy", "Uncategorized"]
    assert [i.name for i in groups[0].items] == ["Oat Milk", "Cream"]
    assert groups[1].items[0].stock_percentage == 100.0


# ── Store reads ───────────────────────────────────

@pytest.mark.asyncio
async def test_list_syncs_cache(mock_db, make_item):
    items = [make_item(name="Beans"), make_item(name="Cups")]
    mock_db.execute.return_value = scalars_result(items)
    store = InventoryStore(mock_db)

    result = await store.list_items()

    assert [i.name for i in result] == ["Beans", "Cups"]
    assert len(store.cache) == 2


@pytest.mark.asyncio
async def test_list_failure_raises_fetch_error_and_notifies(mock_db):
    mock_db.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
    notifier = RecordingNotifier()

    with pytest.raises(FetchError):
        await InventoryStore(mock_db, notifier).list_items()

    assert notifier.items[0].severity == Severity.ERROR
    assert notifier.items[0].description == "Failed to fetch inventory data. Please try again."


@pytest.mark.asyncio
async def test_get_missing_item(mock_db):
    mock_db.get.return_value = None

    with pytest.raises(NotFoundError):
        await InventoryStore(mock_db).get(uuid.uuid4())


# ── Store writes ──────────────────────────────────

@pytest.mark.asyncio
async def test_update_quantity_success(mock_db, make_item):
    item = make_item(quantity=2)
    mock_db.get.return_value = item
    notifier = RecordingNotifier()
    store = InventoryStore(mock_db, notifier)

    assert await store.update_quantity(item.id, 20) is True

    assert item.quantity == 20
    assert item.last_restocked is not None
    assert store.cache.get(item.id).quantity == 20
    mock_db.commit.assert_awaited_once()
    assert notifier.items[-1].title == "Inventory Updated"


@pytest.mark.asyncio
async def test_update_quantity_failure_returns_false(mock_db, make_item):
    item = make_item(quantity=2)
    mock_db.get.return_value = item
    mock_db.commit.side_effect = SQLAlchemyError("write failed")
    notifier = RecordingNotifier()
    store = InventoryStore(mock_db, notifier)

    assert await store.update_quantity(item.id, 20) is False

    mock_db.rollback.assert_awaited_once()
    assert item.id not in store.cache
    assert notifier.items[-1].severity == Severity.ERROR


@pytest.mark.asyncio
async def test_update_quantity_rejects_negative(mock_db):
    with pytest.raises(ValidationError):
        await InventoryStore(mock_db).update_quantity(uuid.uuid4(), -1)
    mock_db.get.assert_not_called()


@pytest.mark.asyncio
async def test_update_quantity_missing_item_returns_false(mock_db):
    mock_db.get.return_value = None
    assert await InventoryStore(mock_db).update_quantity(uuid.uuid4(), 4) is False
    mock_db.commit.assert_not_called()


@pytest.mark.asyncio
async def test_create_item_adds_and_caches(mock_db):
    store = InventoryStore(mock_db)

    async def fake_refresh(obj):
        obj.created_at = obj.updated_at = NOW

    mock_db.refresh.side_effect = fake_refresh

    record = await store.create_item(
        InventoryItemCreate(
            name="Espresso Beans",
            quantity=4,
            reorder_level=2,
            price_per_unit=Decimal("18.00"),
            unit="kg",
            category="Coffee",
        )
    )

    mock_db.add.assert_called_once()
    assert record.name == "Espresso Beans"
    assert record.id in store.cache


# ── Endpoints ─────────────────────────────────────

@pytest.mark.asyncio
async def test_list_inventory_endpoint_returns_views(mock_db, make_item, staff_user):
    from cafestock.api.inventory import list_inventory
    from cafestock.core.app_context import AppContext

    mock_db.execute.return_value = scalars_result([make_item(quantity=5, reorder_level=5)])
    ctx = AppContext(user=staff_user)

    result = await list_inventory(search=None, current_user=staff_user, ctx=ctx, db=mock_db)

    assert result.total == 1
    assert result.items[0].stock_percentage == 50.0
    assert result.items[0].max_request_quantity == 15
    assert result.items[0].is_low_stock is True


@pytest.mark.asyncio
async def test_update_quantity_endpoint_failure_is_502(mock_db, make_item, staff_user):
    from cafestock.api.inventory import update_inventory_quantity
    from cafestock.core.app_context import AppContext
    from cafestock.schemas.inventory import InventoryQuantityUpdate

    mock_db.get.return_value = make_item()
    mock_db.commit.side_effect = SQLAlchemyError("write failed")

    with pytest.raises(HTTPException) as exc_info:
        await update_inventory_quantity(
            item_id=uuid.uuid4(),
            body=InventoryQuantityUpdate(quantity=3),
            current_user=staff_user,
            ctx=AppContext(user=staff_user),
            db=mock_db,
        )
    assert exc_info.value.status_code == 502


def test_store_annotations_resolve():
    hints = typing.get_type_hints(InventoryStore.low_stock)
    assert hints["return"] == list[InventoryItemResponse]
    assert "list" not in vars(InventoryStore)
