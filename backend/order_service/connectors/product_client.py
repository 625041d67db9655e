"""
Product Service Connector
Handles all calls from the Order Service to the Product Service

Non-2xx answers and transport failures are translated into the exceptions
in order_service.core.exceptions so routes never see httpx types.
"""
import logging
from typing import Dict, Optional

import httpx

from order_service.core.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ProductServiceError,
    ProductServiceUnavailableError,
)

logger = logging.getLogger(__name__)


class ProductServiceClient:
    """
    Connector for the Product Service REST API

    Handles:
    - Product lookup (existence, price, stock)
    - Stock deduction after an order is stored
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            base_url: Product Service root, e.g. http://product_service:8000
            timeout: Seconds per request
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport
        )

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text

        if isinstance(body, dict) and body.get('detail'):
            return str(body['detail'])
        return response.text

    async def _request(self, method: str, path: str, product_id: int, **kwargs) -> httpx.Response:
        """Send a request, mapping transport failures and 5xx to unavailable"""
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Product Service timed out on {method} {path}: {e}")
            raise ProductServiceUnavailableError(
                f"Product Service timed out: {e}", product_id=product_id
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Product Service unreachable on {method} {path}: {e}")
            raise ProductServiceUnavailableError(
                f"Product Service unavailable: {e}", product_id=product_id
            ) from e

        if response.status_code >= 500:
            logger.error(f"Product Service error {response.status_code} on {method} {path}")
            raise ProductServiceUnavailableError(
                f"Product Service error {response.status_code}: {self._error_detail(response)}",
                product_id=product_id
            )

        if response.status_code == 404:
            raise ProductNotFoundError(f"Product {product_id} not found", product_id=product_id)

        return response

    async def get_product(self, product_id: int) -> Dict:
        """
        Get a product by ID

        Returns:
            Product dict (id, name, price, stock_quantity, ...)

        Raises:
            ProductNotFoundError, ProductServiceUnavailableError, ProductServiceError
        """
        response = await self._request('GET', f'/products/{product_id}', product_id)

        if response.status_code != 200:
            raise ProductServiceError(
                f"Unexpected response {response.status_code} fetching product {product_id}: "
                f"{self._error_detail(response)}",
                product_id=product_id
            )

        return response.json()['data']

    async def deduct_stock(self, product_id: int, quantity: int) -> Dict:
        """
        Deduct stock for a product

        Returns:
            Updated product dict

        Raises:
            InsufficientStockError: Product Service answered 400
            ProductNotFoundError, ProductServiceUnavailableError, ProductServiceError
        """
        response = await self._request(
            'PATCH',
            f'/products/{product_id}/deduct-stock',
            product_id,
            json={'quantity_to_deduct': quantity}
        )

        if response.status_code == 400:
            raise InsufficientStockError(self._error_detail(response), product_id=product_id)

        if response.status_code != 200:
            raise ProductServiceError(
                f"Unexpected response {response.status_code} deducting stock for product {product_id}: "
                f"{self._error_detail(response)}",
                product_id=product_id
            )

        return response.json()['data']
