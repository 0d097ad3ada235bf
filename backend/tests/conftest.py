"""Shared fixtures: mock async sessions and model factories."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from cafestock.models import InventoryItem, InventoryRequest, InventoryRequestStatus
from cafestock.models.role import RoleType
from cafestock.schemas.auth import CurrentUser
from cafestock.db.seed_rbac import permissions_for

NOW = datetime(2024, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def mock_db():
    """AsyncSession stand-in. ``add`` is synchronous on the real session."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def make_item():
    def factory(**overrides) -> InventoryItem:
        fields = dict(
            id=uuid.uuid4(),
            name="Whole Milk",
            quantity=10,
            reorder_level=5,
            price_per_unit=Decimal("2.50"),
            unit="liters",
            category="Dairy",
            created_at=NOW,
            updated_at=NOW,
        )
        fields.update(overrides)
        return InventoryItem(**fields)

    return factory


@pytest.fixture
def make_request():
    def factory(**overrides) -> InventoryRequest:
        fields = dict(
            id=uuid.uuid4(),
            inventory_item_id=uuid.uuid4(),
            staff_entered_quantity=3,
            requested_quantity=6,
            status=InventoryRequestStatus.PENDING,
            created_at=NOW,
            updated_at=NOW,
        )
        fields.update(overrides)
        return InventoryRequest(**fields)

    return factory


def _user(role: RoleType) -> CurrentUser:
    return CurrentUser(
        id=uuid.uuid4(),
        email=f"{role.value}@example.com",
        full_name=role.value.title(),
        role=role,
        permissions=permissions_for(role),
        is_active=True,
    )


@pytest.fixture
def staff_user() -> CurrentUser:
    return _user(RoleType.STAFF)


@pytest.fixture
def admin_user() -> CurrentUser:
    return _user(RoleType.ADMIN)


@pytest.fixture
def customer_user() -> CurrentUser:
    return _user(RoleType.CUSTOMER)


def scalars_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(rows)
    return result


def scalar_result(value):
    result = MagicMock()
    result.scalar_one.return_value = value
    result.scalar_one_or_none.return_value = value
    return result
