"""
Modelos de base de datos
"""
from .product import Product

__all__ = ["Product"]
