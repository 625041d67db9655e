"""
Product Service errors
"""


class InsufficientStockError(Exception):
    """Raised when a stock deduction asks for more than is available"""

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )


class StorageNotConfiguredError(Exception):
    """Raised when an image upload is attempted without Azure credentials"""


class StorageUploadError(Exception):
    """Raised when Azure Blob Storage rejects an upload"""
