"""
Repository Layer - Data Access

Handles all database queries and returns domain models.
"""
from order_service.repositories.order_repository import OrderRepository

__all__ = ['OrderRepository']
