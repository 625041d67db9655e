"""
Domain Layer - Business Entities

Pydantic models for products. These enforce validation on the way in and
shape the JSON on the way out.
"""
from product_service.domain.product import Product, ProductCreate, ProductUpdate, StockDeduction

__all__ = ['Product', 'ProductCreate', 'ProductUpdate', 'StockDeduction']
