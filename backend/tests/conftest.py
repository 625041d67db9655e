"""
Pytest fixtures and configuration for the backend tests

Shared fixtures for both services. Tests that need PostgreSQL ask for a
*_database_url fixture, which skips when the database is unreachable.
"""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from dotenv import load_dotenv

import psycopg2

# Load environment variables for tests
load_dotenv()


def _reachable_database_url(url: str) -> str:
    try:
        conn = psycopg2.connect(url, connect_timeout=2)
    except psycopg2.OperationalError as e:
        pytest.skip(f"PostgreSQL not reachable: {e}")
    conn.close()
    return url


@pytest.fixture(scope="session")
def product_database_url():
    """
    URL of the products database, created with the service schema

    Scope: session (schema created once per test session)
    """
    from product_service.core.config import settings
    from product_service.core.database import init_db

    url = _reachable_database_url(settings.database_url)
    init_db()
    return url


@pytest.fixture(scope="session")
def order_database_url():
    """URL of the orders database, created with the service schema"""
    from order_service.core.config import settings
    from order_service.core.database import init_db

    url = _reachable_database_url(settings.database_url)
    init_db()
    return url


@pytest.fixture
def product_row():
    """
    A products table row as returned by RealDictCursor
    """
    return {
        'id': 1,
        'name': 'Mechanical Keyboard',
        'description': 'Tenkeyless, brown switches',
        'price': Decimal('89.90'),
        'stock_quantity': 25,
        'image_url': None,
        'created_at': datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc),
        'updated_at': None
    }


@pytest.fixture
def sample_product_data():
    """
    Provides sample product payload for create requests
    """
    return {
        "name": "Mechanical Keyboard",
        "description": "Tenkeyless, brown switches",
        "price": 89.90,
        "stock_quantity": 25
    }


@pytest.fixture
def order_row():
    """An orders table row as returned by RealDictCursor"""
    return {
        'id': 7,
        'user_id': 42,
        'order_date': datetime(2025, 2, 1, 9, 30, tzinfo=timezone.utc),
        'status': 'pending',
        'total_amount': Decimal('179.80'),
        'shipping_address': '1 Main St',
        'created_at': datetime(2025, 2, 1, 9, 30, tzinfo=timezone.utc),
        'updated_at': None
    }


@pytest.fixture
def order_item_row():
    """An order_items table row as returned by RealDictCursor"""
    return {
        'id': 70,
        'order_id': 7,
        'product_id': 1,
        'quantity': 2,
        'price_at_purchase': Decimal('89.90'),
        'item_total': Decimal('179.80')
    }


@pytest.fixture
def sample_order_data():
    """
    Provides sample order payload for create requests
    """
    return {
        "user_id": 42,
        "shipping_address": "1 Main St",
        "items": [
            {"product_id": 1, "quantity": 2}
        ]
    }
