"""
Order Placement Service
Validates an order against the Product Service, stores it and deducts stock

Flow:
1. Merge repeated products into one line
2. Look up every product (exists? enough stock?) and take its current price
3. Store the order as pending, with items, in one transaction
4. Deduct stock line by line; confirm the order, or mark it failed on the
   first error of any kind while deducting
"""
import logging
from decimal import Decimal
from typing import Dict, List

from order_service.connectors.product_client import ProductServiceClient
from order_service.core.exceptions import (
    InsufficientStockError,
    OrderFulfillmentError,
    OrderValidationError,
    ProductServiceError,
)
from order_service.domain.order import MAX_AMOUNT, Order, OrderCreate, OrderStatus, line_total
from order_service.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class OrderPlacementService:
    """
    Service for placing orders

    Handles:
    - Product validation and pricing through ProductServiceClient
    - Persistence through OrderRepository
    - Stock deduction and final status
    """

    def __init__(self, repository: OrderRepository, product_client: ProductServiceClient):
        self.repository = repository
        self.product_client = product_client

    async def price_items(self, request: OrderCreate) -> List[Dict]:
        """
        Validate and price each requested line

        Raises:
            ProductNotFoundError: a product does not exist
            InsufficientStockError: a product has fewer units than requested
            ProductServiceUnavailableError: the Product Service is down
            OrderValidationError: the order total does not fit an amount column
        """
        lines = []

        for item in request.merged_items():
            product = await self.product_client.get_product(item.product_id)

            available = product.get('stock_quantity', 0)
            if available < item.quantity:
                raise InsufficientStockError(
                    f"Insufficient stock for product {item.product_id} "
                    f"({product.get('name')}): requested {item.quantity}, available {available}",
                    product_id=item.product_id
                )

            # str() keeps the float from the JSON body from leaking binary noise
            price = Decimal(str(product['price']))
            lines.append({
                'product_id': item.product_id,
                'quantity': item.quantity,
                'price_at_purchase': price,
                'item_total': line_total(price, item.quantity)
            })

        total_amount = sum((line['item_total'] for line in lines), Decimal('0.00'))
        if total_amount > MAX_AMOUNT:
            raise OrderValidationError(
                f"Order total {total_amount} exceeds the maximum of {MAX_AMOUNT}"
            )

        return lines

    async def place_order(self, request: OrderCreate) -> Order:
        """
        Place an order

        Returns:
            The confirmed order

        Raises:
            ProductServiceError subclasses before anything is stored
            OrderValidationError when the total is too large to store
            OrderFulfillmentError once the order is stored but stock could
            not be deducted (the order is left as failed)
        """
        lines = await self.price_items(request)
        total_amount = sum((line['item_total'] for line in lines), Decimal('0.00'))

        order = self.repository.create(
            user_id=request.user_id,
            shipping_address=request.shipping_address,
            lines=lines,
            total_amount=total_amount,
            status=OrderStatus.PENDING
        )
        logger.info(f"Order {order.id} stored for user {order.user_id}: {len(lines)} lines, total {total_amount}")

        for line in lines:
            try:
                await self.product_client.deduct_stock(line['product_id'], line['quantity'])
            except ProductServiceError as e:
                logger.error(f"Stock deduction failed for order {order.id}, product {line['product_id']}: {e}")
                self._mark_failed(order.id)
                raise OrderFulfillmentError(order.id, e) from e
            except BaseException as e:
                # Includes cancellation and malformed Product Service replies
                logger.error(f"Unexpected error deducting stock for order {order.id}, product {line['product_id']}: {e!r}")
                self._mark_failed(order.id)
                raise

        confirmed = self.repository.update_status(order.id, OrderStatus.CONFIRMED)
        logger.info(f"Order {order.id} confirmed")
        return confirmed or order

    def _mark_failed(self, order_id: int) -> None:
        """Set the order to failed without hiding the error that stopped it"""
        try:
            self.repository.update_status(order_id, OrderStatus.FAILED)
        except Exception as e:
            logger.error(f"Could not mark order {order_id} as failed: {e}")
