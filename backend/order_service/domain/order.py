"""
Order Domain Models

Represents orders and their line items.
"""
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP


CENTS = Decimal('0.01')

# Largest value a numeric(10,2) amount column holds
MAX_AMOUNT = Decimal('99999999.99')


class OrderStatus(str, Enum):
    """Order lifecycle states"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    FAILED = "failed"


def line_total(price: Decimal, quantity: int) -> Decimal:
    """price * quantity rounded to cents"""
    return (Decimal(price) * quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


class OrderItem(BaseModel):
    """
    Order Item domain model - represents a line item in an order

    Fields:
        id: Internal order item ID
        order_id: Parent order ID
        product_id: Product ID in the Product Service
        quantity: Number of units ordered
        price_at_purchase: Unit price when the order was placed
        item_total: price_at_purchase * quantity
    """

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Parent order ID")
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    price_at_purchase: Decimal = Field(..., description="Unit price at order time", ge=0)
    item_total: Decimal = Field(..., description="Total for line item", ge=0)

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()

        for field in ['price_at_purchase', 'item_total']:
            if data.get(field) is not None:
                data[field] = float(data[field])

        return data


class Order(BaseModel):
    """
    Order domain model - represents a customer order

    Fields:
        id: Internal order ID (primary key)
        user_id: ID of the user that placed the order
        order_date: When the order was placed
        status: Lifecycle state (see OrderStatus)
        total_amount: Sum of item totals
        shipping_address: Delivery address (optional)
        items: Line items
    """

    id: int = Field(..., description="Order ID")
    user_id: int = Field(..., description="User ID")
    order_date: Optional[datetime] = Field(None, description="Order timestamp")
    status: OrderStatus = Field(OrderStatus.PENDING, description="Order status")
    total_amount: Decimal = Field(..., description="Order total", ge=0)
    shipping_address: Optional[str] = Field(None, description="Shipping address")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    items: List[OrderItem] = Field(default_factory=list, description="Order line items")

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        """Total units across all items"""
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary with computed fields"""
        data = self.model_dump(exclude={'items'})
        data['status'] = self.status.value
        data['total_amount'] = float(self.total_amount)
        data['items'] = [item.to_dict() for item in self.items]
        data['item_count'] = self.item_count

        for field in ['order_date', 'created_at', 'updated_at']:
            if data.get(field) is not None:
                data[field] = data[field].isoformat()

        return data


class OrderItemCreate(BaseModel):
    """A requested line: which product and how many"""
    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    """Schema for placing a new order"""
    user_id: int = Field(..., ge=1)
    shipping_address: Optional[str] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)

    def merged_items(self) -> List[OrderItemCreate]:
        """
        Collapse repeated product IDs into one line, summing quantities

        Keeps the order in which each product first appeared.
        """
        quantities = {}
        for item in self.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        return [
            OrderItemCreate(product_id=product_id, quantity=quantity)
            for product_id, quantity in quantities.items()
        ]


class OrderStatusUpdate(BaseModel):
    """Body of PATCH /orders/{id}/status"""
    status: OrderStatus
