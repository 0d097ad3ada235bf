"""HTTP-level checks: routing, RBAC, and error mapping through the real app."""

import uuid

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError

from cafestock.core.app_context import AppContextRegistry
from cafestock.core.deps import get_current_user
from cafestock.db.base import get_db
from cafestock.main import app


@pytest.fixture
def as_user(mock_db):
    """Serve requests as the given user against ``mock_db``."""

    def login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    # ASGITransport does not run the lifespan
    app.state.contexts = AppContextRegistry()
    yield login
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_requires_token(client):
    response = await client.get("/api/v1/inventory")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_customer_cannot_read_inventory(client, as_user, customer_user):
    as_user(customer_user)
    response = await client.get("/api/v1/inventory")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_not_found_maps_to_404(client, as_user, mock_db, staff_user):
    as_user(staff_user)
    mock_db.get.return_value = None

    response = await client.get(f"/api/v1/inventory/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"title": "Not found", "detail": "Inventory item not found"}


@pytest.mark.asyncio
async def test_fetch_failure_maps_to_503_and_queues_notification(
    client, as_user, mock_db, staff_user
):
    as_user(staff_user)
    mock_db.execute.side_effect = SQLAlchemyError("down")

    response = await client.get("/api/v1/inventory")
    assert response.status_code == 503

    notices = (await client.get("/api/v1/notifications")).json()
    assert [n["severity"] for n in notices] == ["error"]
    assert (await client.get("/api/v1/notifications")).json() == []


@pytest.mark.asyncio
async def test_staff_cannot_approve(client, as_user, staff_user):
    as_user(staff_user)
    response = await client.post(f"/api/v1/inventory-requests/{uuid.uuid4()}/approve", json={})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_request_builder_flow(client, as_user, mock_db, staff_user, make_item):
    as_user(staff_user)
    item = make_item(quantity=10, reorder_level=5)
    mock_db.get.return_value = item

    response = await client.post("/api/v1/request-builder/mode", params={"enabled": "true"})
    assert response.json()["request_mode"] is True

    await client.post(f"/api/v1/request-builder/items/{item.id}/open")
    response = await client.post(f"/api/v1/request-builder/items/{item.id}/increment")
    assert response.json()["requested_quantity"] == 2

    response = await client.post(
        f"/api/v1/request-builder/items/{item.id}/confirm", json={"quantity": 16}
    )
    assert response.status_code == 422

    response = await client.post(
        f"/api/v1/request-builder/items/{item.id}/confirm", json={"quantity": 4}
    )
    state = response.json()
    assert response.status_code == 200
    assert state["pending_lines"][0]["requested_quantity"] == 4
    assert state["total_cost"] == "10.00"


@pytest.mark.asyncio
async def test_invalid_transition_maps_to_409(client, as_user, mock_db, admin_user):
    from datetime import datetime, timezone
    from decimal import Decimal

    from cafestock.models.purchase_order import PurchaseOrder, PurchaseOrderStatus

    as_user(admin_user)
    mock_db.get.return_value = PurchaseOrder(
        id=uuid.uuid4(),
        po_number="PO-2024-001",
        status=PurchaseOrderStatus.DELIVERED,
        total_amount=Decimal("10.00"),
        order_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )

    response = await client.patch(
        f"/api/v1/purchase-orders/{uuid.uuid4()}/status", json={"status": "sent"}
    )

    assert response.status_code == 409
    assert response.json()["title"] == "Invalid status change"
