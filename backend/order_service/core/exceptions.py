"""
Order Service errors

Failures talking to the Product Service, raised by ProductServiceClient.
"""


class ProductServiceError(Exception):
    """Base error for Product Service calls"""

    def __init__(self, message: str, product_id: int = None):
        super().__init__(message)
        self.product_id = product_id


class ProductNotFoundError(ProductServiceError):
    """The Product Service answered 404"""


class InsufficientStockError(ProductServiceError):
    """The product does not have enough units"""


class ProductServiceUnavailableError(ProductServiceError):
    """The Product Service could not be reached or failed with 5xx"""


class OrderFulfillmentError(Exception):
    """
    Stock deduction failed after the order was stored

    The order has been marked failed; cause is the ProductServiceError that
    stopped it.
    """

    def __init__(self, order_id: int, cause: ProductServiceError):
        super().__init__(f"Order {order_id} failed: {cause}")
        self.order_id = order_id
        self.cause = cause


class OrderValidationError(Exception):
    """The order was rejected before anything was stored"""
