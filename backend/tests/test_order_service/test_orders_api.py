"""
Tests for the Order Service HTTP API

The repository and placement service are replaced with mocks.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from order_service.api.orders import get_order_repository, get_placement_service
from order_service.core.exceptions import (
    InsufficientStockError,
    OrderFulfillmentError,
    OrderValidationError,
    ProductNotFoundError,
    ProductServiceError,
    ProductServiceUnavailableError,
)
from order_service.domain.order import Order, OrderItem, OrderStatus
from order_service.main import app


@pytest.fixture
def order(order_row, order_item_row):
    return Order(**{**order_row, 'items': [OrderItem(**order_item_row)]})


@pytest.fixture
def repo():
    return MagicMock()


@pytest.fixture
def placement():
    service = MagicMock()
    service.place_order = AsyncMock()
    return service


@pytest.fixture
def client(repo, placement):
    app.dependency_overrides[get_order_repository] = lambda: repo
    app.dependency_overrides[get_placement_service] = lambda: placement
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCreateOrder:

    def test_create_order(self, client, placement, order, sample_order_data):
        placement.place_order.return_value = order.model_copy(update={'status': OrderStatus.CONFIRMED})

        response = client.post("/orders/", json=sample_order_data)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == 7
        assert data["status"] == "confirmed"
        assert data["items"][0]["product_id"] == 1
        request = placement.place_order.await_args[0][0]
        assert request.user_id == 42

    def test_create_order_requires_items(self, client, placement):
        response = client.post("/orders/", json={"user_id": 1, "items": []})

        assert response.status_code == 422
        placement.place_order.assert_not_called()

    @pytest.mark.parametrize("error, expected_status", [
        (ProductNotFoundError("Product 9 not found", product_id=9), 404),
        (InsufficientStockError("Insufficient stock for product 1", product_id=1), 400),
        (ProductServiceUnavailableError("Product Service unavailable"), 503),
        (ProductServiceError("Unexpected response 422"), 502),
    ])
    def test_validation_failures(self, client, placement, sample_order_data, error, expected_status):
        placement.place_order.side_effect = error

        response = client.post("/orders/", json=sample_order_data)

        assert response.status_code == expected_status
        assert response.json()["detail"] == str(error)

    @pytest.mark.parametrize("cause, expected_status", [
        (InsufficientStockError("Insufficient stock for product 1", product_id=1), 409),
        (ProductServiceUnavailableError("Product Service unavailable"), 503),
        (ProductNotFoundError("Product 1 not found", product_id=1), 404),
    ])
    def test_fulfillment_failures(self, client, placement, sample_order_data, cause, expected_status):
        placement.place_order.side_effect = OrderFulfillmentError(7, cause)

        response = client.post("/orders/", json=sample_order_data)

        assert response.status_code == expected_status
        assert response.json()["detail"].startswith("Order 7 failed")

    def test_order_total_too_large(self, client, placement, sample_order_data):
        placement.place_order.side_effect = OrderValidationError(
            "Order total 100005000.00 exceeds the maximum of 99999999.99"
        )

        response = client.post("/orders/", json=sample_order_data)

        assert response.status_code == 400
        assert "exceeds the maximum" in response.json()["detail"]

    def test_unexpected_error(self, client, placement, sample_order_data):
        placement.place_order.side_effect = RuntimeError("database gone")

        response = client.post("/orders/", json=sample_order_data)

        assert response.status_code == 500
        assert "database gone" in response.json()["detail"]


class TestQueries:

    def test_list_orders(self, client, repo, order):
        repo.find_all.return_value = ([order], 1)

        response = client.get("/orders/", params={"user_id": 42, "status": "pending", "skip": 0, "limit": 20})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["data"][0]["item_count"] == 2
        repo.find_all.assert_called_once_with(user_id=42, status="pending", limit=20, offset=0)

    def test_list_orders_rejects_unknown_status(self, client, repo):
        assert client.get("/orders/", params={"status": "lost"}).status_code == 422
        repo.find_all.assert_not_called()

    def test_get_order(self, client, repo, order):
        repo.find_by_id.return_value = order

        response = client.get("/orders/7")

        assert response.status_code == 200
        assert response.json()["data"]["total_amount"] == 179.8

    def test_get_order_not_found(self, client, repo):
        repo.find_by_id.return_value = None

        response = client.get("/orders/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Order 999 not found"

    def test_get_order_items(self, client, repo, order):
        repo.find_items.return_value = order.items

        response = client.get("/orders/7/items")

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["data"][0]["item_total"] == 179.8

    def test_get_order_items_not_found(self, client, repo):
        repo.find_items.return_value = None

        assert client.get("/orders/999/items").status_code == 404

    def test_stats(self, client, repo):
        repo.get_stats.return_value = {'total_orders': 3, 'total_revenue': 10.5, 'by_status': {'confirmed': 3}}

        response = client.get("/orders/stats")

        assert response.status_code == 200
        assert response.json()["data"]["total_orders"] == 3


class TestChanges:

    def test_update_status(self, client, repo, order):
        repo.update_status.return_value = order.model_copy(update={'status': OrderStatus.SHIPPED})

        response = client.patch("/orders/7/status", json={"status": "shipped"})

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "shipped"
        repo.update_status.assert_called_once_with(7, OrderStatus.SHIPPED)

    def test_update_status_rejects_unknown_status(self, client, repo):
        response = client.patch("/orders/7/status", json={"status": "lost"})

        assert response.status_code == 422
        repo.update_status.assert_not_called()

    def test_update_status_not_found(self, client, repo):
        repo.update_status.return_value = None

        assert client.patch("/orders/999/status", json={"status": "cancelled"}).status_code == 404

    def test_delete_order(self, client, repo):
        repo.delete.return_value = True

        assert client.delete("/orders/7").status_code == 204

    def test_delete_order_not_found(self, client, repo):
        repo.delete.return_value = False

        assert client.delete("/orders/999").status_code == 404
