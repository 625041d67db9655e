"""
Repository Layer - Data Access

Handles all database queries and returns domain models.
"""
from product_service.repositories.product_repository import ProductRepository

__all__ = ['ProductRepository']
