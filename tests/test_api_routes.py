import pytest
import pytest_asyncio
from decimal import Decimal
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from unittest.mock import patch, AsyncMock
from uuid import uuid4

from restopos.core.errors import (
    AlreadyClosedError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
)
from restopos.main import app
from restopos.models.inventory import InventoryItem
from restopos.models.table import TableStatus


@pytest.fixture
def client():
    return TestClient(app)


@pytest_asyncio.fixture
async def api(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestErrorEnvelope:
    def test_unknown_order_is_404(self, client):
        order_id = uuid4()
        with patch('restopos.api.v1.orders.get_order', new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = NotFoundError("Order", order_id)

            response = client.get(f"/api/v1/orders/{order_id}")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "not_found"
        assert body["request_id"]

    def test_insufficient_stock_is_409_with_details(self, client):
        with patch('restopos.api.v1.orders.close_order', new_callable=AsyncMock) as mock_close:
            mock_close.side_effect = InsufficientStockError("Ground coffee", Decimal("54"), Decimal("40"), "GRAM")

            response = client.post(f"/api/v1/orders/{uuid4()}/close")

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "insufficient_stock"
        assert error["details"] == {"ingredient": "Ground coffee", "required": "54", "available": "40", "unit": "GRAM"}

    def test_already_closed_is_409(self, client):
        order_id = uuid4()
        with patch('restopos.api.v1.orders.close_order', new_callable=AsyncMock) as mock_close:
            mock_close.side_effect = AlreadyClosedError(order_id)

            response = client.post(f"/api/v1/orders/{order_id}/close")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "already_closed"

    def test_persistence_failure_is_503_and_retryable(self, client):
        with patch('restopos.api.v1.orders.close_order', new_callable=AsyncMock) as mock_close:
            mock_close.side_effect = PersistenceError("Database failure while closing order")

            response = client.post(f"/api/v1/orders/{uuid4()}/close")

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "persistence_error"
        assert error["details"]["retryable"] is True

    def test_empty_cart_is_400(self, client):
        response = client.post("/api/v1/orders/", json={"items": []})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_malformed_body_is_422(self, client):
        response = client.post("/api/v1/orders/", json={"items": [{"product_id": "latte", "quantity": 0}]})
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "validation_error"
        assert body["error"]["details"]


class TestOrderFlow:
    @pytest.mark.asyncio
    async def test_create_then_close_dine_in(self, api, cafe):
        payload = {
            "table_id": str(cafe.table.id),
            "items": [{"product_id": "latte", "quantity": 2, "modifiers": ["Extra shot"]}],
        }

        created = await api.post("/api/v1/orders/", json=payload)

        assert created.status_code == 201
        order = created.json()["data"]
        assert order["type"] == "DINE_IN"
        assert order["table_number"] == 1
        assert Decimal(order["total"]) == Decimal("11")
        assert Decimal(order["items"][0]["unit_price"]) == Decimal("5.5")

        closed = await api.post(f"/api/v1/orders/{order['id']}/close")

        assert closed.status_code == 200
        assert closed.json()["data"]["status"] == "CLOSED"
        assert (await InventoryItem.get(id=cafe.coffee.id)).current_stock == Decimal("4964")

        again = await api.post(f"/api/v1/orders/{order['id']}/close")
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "already_closed"

        tables = (await api.get("/api/v1/tables/")).json()["data"]
        assert tables[0]["status"] == TableStatus.DIRTY.value
        assert tables[0]["active_orders"] == 0

    @pytest.mark.asyncio
    async def test_close_with_short_stock_reports_ingredient(self, api, cafe):
        await InventoryItem.filter(id=cafe.milk.id).update(current_stock=Decimal("150"))
        created = await api.post("/api/v1/orders/", json={"items": [{"product_id": "latte", "quantity": 1}]})
        order_id = created.json()["data"]["id"]

        response = await api.post(f"/api/v1/orders/{order_id}/close")

        assert response.status_code == 409
        details = response.json()["error"]["details"]
        assert details["ingredient"] == "Whole milk"
        assert Decimal(details["required"]) == Decimal("200")
        assert Decimal(details["available"]) == Decimal("150")

        order = (await api.get(f"/api/v1/orders/{order_id}")).json()["data"]
        assert order["status"] == "PENDING"

    @pytest.mark.asyncio
    async def test_status_patch_and_advance(self, api, cafe):
        created = await api.post("/api/v1/orders/", json={"items": [{"product_id": "espresso", "quantity": 1}]})
        order_id = created.json()["data"]["id"]

        patched = await api.patch(f"/api/v1/orders/{order_id}/status", json={"status": "PREPARING"})
        advanced = await api.post(f"/api/v1/orders/{order_id}/advance")

        assert patched.json()["data"]["status"] == "PREPARING"
        assert advanced.json()["data"]["status"] == "READY"

        kitchen = (await api.get("/api/v1/kitchen/orders")).json()["data"]["orders"]
        assert [o["status"] for o in kitchen] == ["READY"]

    @pytest.mark.asyncio
    async def test_delivery_dispatch_and_customer_book(self, api, cafe):
        payload = {
            "type": "DELIVERY",
            "items": [{"product_id": "espresso", "quantity": 2}],
            "delivery_info": {
                "customer_name": "Ana",
                "customer_phone": "+561111",
                "customer_address": "Av. Central 12",
                "delivery_fee": "2.00",
            },
        }
        created = await api.post("/api/v1/orders/", json=payload)
        order = created.json()["data"]
        assert Decimal(order["total"]) == Decimal("7")
        delivery_id = order["delivery"]["id"]

        assigned = await api.patch(f"/api/v1/delivery/{delivery_id}", json={"status": "ASSIGNED", "driver_id": "d-1"})
        picked = await api.patch(f"/api/v1/delivery/{delivery_id}", json={"status": "PICKED_UP"})

        assert assigned.json()["data"]["driver_id"] == "d-1"
        assert picked.json()["data"]["pickup_time"] is not None

        listed = (await api.get("/api/v1/delivery/", params={"driver_id": "d-1"})).json()["data"]
        assert [d["id"] for d in listed] == [delivery_id]

        customers = (await api.get("/api/v1/customers/", params={"search": "56111"})).json()["data"]
        assert customers[0]["name"] == "Ana"
        assert customers[0]["order_count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_delivery_is_404(self, api):
        response = await api.patch(f"/api/v1/delivery/{uuid4()}", json={"status": "ASSIGNED"})
        assert response.status_code == 404


class TestInventoryRoutes:
    @pytest.mark.asyncio
    async def test_add_item_and_low_stock(self, api, cafe):
        created = await api.post(
            "/api/v1/inventory/",
            json={"name": "Sugar", "current_stock": "500", "min_stock": "800", "unit": "GRAM"},
        )

        assert created.status_code == 201
        assert created.json()["data"]["is_low_stock"] is True

        names = [i["name"] for i in (await api.get("/api/v1/inventory/")).json()["data"]]
        low = [i["name"] for i in (await api.get("/api/v1/inventory/low-stock")).json()["data"]]
        assert set(names) == {"Ground coffee", "Whole milk", "Sugar"}
        assert low == ["Sugar"]

    @pytest.mark.asyncio
    async def test_duplicate_item_is_rejected(self, api, cafe):
        response = await api.post("/api/v1/inventory/", json={"name": "Whole milk", "current_stock": "1"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"
