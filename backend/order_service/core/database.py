"""
Order database access

Binds the shared connection helpers to this service's settings.
"""
from sqlalchemy.orm import declarative_base

from commerce_core import database as core_db
from order_service.core.config import settings

# Base para modelos
Base = declarative_base()


def get_db_connection_dict():
    """psycopg2 connection with RealDictCursor to the orders database"""
    return core_db.get_db_connection_dict(settings.database_url)


def init_db():
    """Wait for the orders database and create missing tables"""
    from order_service import models  # noqa: F401

    core_db.init_schema(
        settings.database_url,
        Base.metadata,
        max_retries=settings.DB_CONNECT_RETRIES,
        retry_delay=settings.DB_CONNECT_RETRY_DELAY
    )
