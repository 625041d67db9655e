"""
Modelos de base de datos
"""
from .order import Order, OrderItem

__all__ = ["Order", "OrderItem"]
