"""
Commerce Core - shared infrastructure for the product and order services

Configuration, PostgreSQL connection helpers, logging and health checks
used by both FastAPI services.
"""
from commerce_core.config import DatabaseSettings
from commerce_core.logging_config import configure_logging

__all__ = ['DatabaseSettings', 'configure_logging']
