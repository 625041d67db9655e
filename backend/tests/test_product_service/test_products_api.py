"""
Tests for the Product Service HTTP API

The repository and storage dependencies are replaced with mocks, so no
database or Azure account is needed.
"""
import pytest
from unittest.mock import MagicMock
from decimal import Decimal

from fastapi.testclient import TestClient

from product_service.api.products import get_product_repository, get_storage_service
from product_service.core.config import Settings
from product_service.core.exceptions import (
    InsufficientStockError,
    StorageNotConfiguredError,
    StorageUploadError,
)
from product_service.domain.product import Product
from product_service.main import app


@pytest.fixture
def product(product_row):
    return Product(**product_row)


@pytest.fixture
def repo():
    return MagicMock()


@pytest.fixture
def storage():
    service = MagicMock()
    service.settings = Settings(_env_file=None, MAX_IMAGE_SIZE_MB=1)
    return service


@pytest.fixture
def client(repo, storage):
    app.dependency_overrides[get_product_repository] = lambda: repo
    app.dependency_overrides[get_storage_service] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestProductCrud:
    """Create, read, update and delete"""

    def test_create_product(self, client, repo, product, sample_product_data):
        repo.create.return_value = product

        response = client.post("/products/", json=sample_product_data)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["id"] == 1
        assert body["data"]["price"] == 89.9
        created = repo.create.call_args[0][0]
        assert created.price == Decimal('89.9')

    @pytest.mark.parametrize("payload", [
        {"name": "Free", "price": 0, "stock_quantity": 1},
        {"name": "Negative stock", "price": 1.5, "stock_quantity": -1},
        {"name": "", "price": 1.5},
        {"price": 1.5},
    ])
    def test_create_product_validation(self, client, repo, payload):
        response = client.post("/products/", json=payload)

        assert response.status_code == 422
        repo.create.assert_not_called()

    def test_list_products(self, client, repo, product):
        repo.find_all.return_value = ([product], 1)

        response = client.get("/products/", params={"skip": 5, "limit": 10, "search": "key"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["count"] == 1
        assert body["offset"] == 5
        assert body["data"][0]["name"] == "Mechanical Keyboard"
        repo.find_all.assert_called_once_with(search="key", limit=10, offset=5)

    def test_list_products_rejects_bad_limit(self, client):
        assert client.get("/products/", params={"limit": 0}).status_code == 422

    def test_get_product(self, client, repo, product):
        repo.find_by_id.return_value = product

        response = client.get("/products/1")

        assert response.status_code == 200
        assert response.json()["data"]["stock_quantity"] == 25
        assert response.json()["data"]["in_stock"] is True

    def test_get_product_not_found(self, client, repo):
        repo.find_by_id.return_value = None

        response = client.get("/products/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Product 999 not found"

    def test_get_product_database_error(self, client, repo):
        repo.find_by_id.side_effect = RuntimeError("connection lost")

        response = client.get("/products/1")

        assert response.status_code == 500
        assert "connection lost" in response.json()["detail"]

    def test_update_product(self, client, repo, product):
        repo.update.return_value = product.model_copy(update={"name": "Keyboard v2"})

        response = client.put("/products/1", json={"name": "Keyboard v2"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Keyboard v2"
        product_id, changes = repo.update.call_args[0]
        assert product_id == 1
        assert changes.model_dump(exclude_unset=True) == {"name": "Keyboard v2"}

    def test_update_product_not_found(self, client, repo):
        repo.update.return_value = None

        assert client.put("/products/999", json={"name": "x"}).status_code == 404

    def test_update_product_validation(self, client, repo):
        assert client.put("/products/1", json={"price": -3}).status_code == 422
        repo.update.assert_not_called()

    def test_delete_product(self, client, repo):
        repo.delete.return_value = True

        response = client.delete("/products/1")

        assert response.status_code == 204
        assert response.content == b""

    def test_delete_product_not_found(self, client, repo):
        repo.delete.return_value = False

        assert client.delete("/products/999").status_code == 404


class TestDeductStock:
    """PATCH /products/{id}/deduct-stock"""

    def test_deduct_stock(self, client, repo, product):
        repo.deduct_stock.return_value = product.model_copy(update={"stock_quantity": 22})

        response = client.patch("/products/1/deduct-stock", json={"quantity_to_deduct": 3})

        assert response.status_code == 200
        assert response.json()["data"]["stock_quantity"] == 22
        repo.deduct_stock.assert_called_once_with(1, 3)

    def test_deduct_stock_insufficient(self, client, repo):
        repo.deduct_stock.side_effect = InsufficientStockError(1, 30, 25)

        response = client.patch("/products/1/deduct-stock", json={"quantity_to_deduct": 30})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Insufficient stock")

    def test_deduct_stock_not_found(self, client, repo):
        repo.deduct_stock.return_value = None

        response = client.patch("/products/999/deduct-stock", json={"quantity_to_deduct": 1})

        assert response.status_code == 404

    def test_deduct_stock_requires_positive_quantity(self, client, repo):
        response = client.patch("/products/1/deduct-stock", json={"quantity_to_deduct": 0})

        assert response.status_code == 422
        repo.deduct_stock.assert_not_called()


class TestUploadImage:
    """POST /products/{id}/upload-image"""

    def test_upload_image(self, client, repo, storage, product):
        url = "https://acct.blob.core.windows.net/product-images/product-1-abc.png?sig=x"
        repo.find_by_id.return_value = product
        storage.upload_product_image.return_value = url
        repo.set_image_url.return_value = product.model_copy(update={"image_url": url})

        response = client.post(
            "/products/1/upload-image",
            files={"file": ("photo.png", b"\x89PNG fake", "image/png")}
        )

        assert response.status_code == 200
        assert response.json()["data"]["image_url"] == url
        storage.upload_product_image.assert_called_once_with(
            1, b"\x89PNG fake", filename="photo.png", content_type="image/png"
        )
        repo.set_image_url.assert_called_once_with(1, url)

    def test_upload_rejects_non_image(self, client, repo, storage):
        response = client.post(
            "/products/1/upload-image",
            files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 400
        storage.upload_product_image.assert_not_called()

    def test_upload_rejects_oversized_file(self, client, repo, storage, product):
        repo.find_by_id.return_value = product

        response = client.post(
            "/products/1/upload-image",
            files={"file": ("big.png", b"x" * (1024 * 1024 + 1), "image/png")}
        )

        assert response.status_code == 400
        storage.upload_product_image.assert_not_called()

    def test_upload_product_not_found(self, client, repo, storage):
        repo.find_by_id.return_value = None

        response = client.post(
            "/products/999/upload-image",
            files={"file": ("photo.png", b"data", "image/png")}
        )

        assert response.status_code == 404
        storage.upload_product_image.assert_not_called()

    def test_upload_storage_not_configured(self, client, repo, storage, product):
        repo.find_by_id.return_value = product
        storage.upload_product_image.side_effect = StorageNotConfiguredError("not configured")

        response = client.post(
            "/products/1/upload-image",
            files={"file": ("photo.png", b"data", "image/png")}
        )

        assert response.status_code == 503
        repo.set_image_url.assert_not_called()

    def test_upload_storage_failure(self, client, repo, storage, product):
        repo.find_by_id.return_value = product
        storage.upload_product_image.side_effect = StorageUploadError("Failed to upload image: 403")

        response = client.post(
            "/products/1/upload-image",
            files={"file": ("photo.png", b"data", "image/png")}
        )

        assert response.status_code == 500
        assert "Failed to upload image" in response.json()["detail"]
