"""
Domain Layer - Business Entities

Pydantic models for orders and their line items.
"""
from order_service.domain.order import (
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
    OrderStatusUpdate,
)

__all__ = ['Order', 'OrderCreate', 'OrderItem', 'OrderItemCreate', 'OrderStatus', 'OrderStatusUpdate']
