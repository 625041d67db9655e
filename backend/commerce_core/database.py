"""
PostgreSQL connection helpers

Each service owns its own database, so every helper takes the connection URL
explicitly instead of reading a global:
- psycopg2 direct connections (repositories run raw SQL)
- SQLAlchemy engine (schema creation from the declarative models)
- retry logic for databases that are still starting up
"""
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Seconds psycopg2 waits for the TCP connection before failing
CONNECTION_TIMEOUT = 5


# ============================================================================
# psycopg2 Direct Connections (for raw SQL queries)
# ============================================================================

def get_db_connection(database_url: str):
    """
    Get a direct psycopg2 database connection (returns tuples)

    Raises:
        Exception if database_url is empty
    """
    if not database_url:
        raise Exception("DATABASE_URL not configured")

    return psycopg2.connect(database_url, connect_timeout=CONNECTION_TIMEOUT)


def get_db_connection_dict(database_url: str):
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Use this for repositories: rows map straight onto the domain models.

    Example:
        conn = get_db_connection_dict(settings.database_url)
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM products")
        rows = cursor.fetchall()  # list of dicts
        cursor.close()
        conn.close()
    """
    if not database_url:
        raise Exception("DATABASE_URL not configured")

    return psycopg2.connect(
        database_url,
        cursor_factory=RealDictCursor,
        connect_timeout=CONNECTION_TIMEOUT
    )


def get_db_connection_with_retry(database_url: str, max_retries=3, retry_delay=1.0):
    """
    Get a psycopg2 connection with automatic retry on connection failures

    Retries psycopg2.OperationalError with exponential backoff
    (retry_delay, 2*retry_delay, 4*retry_delay, ...). Any other error fails
    immediately.

    Args:
        database_url: PostgreSQL connection URL
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)

    Returns:
        psycopg2 connection object, already validated with SELECT 1

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    if not database_url:
        raise Exception("DATABASE_URL not configured")

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(database_url, connect_timeout=CONNECTION_TIMEOUT)

            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise last_error

        except Exception as e:
            logger.error(f"Unexpected error during connection: {e}")
            raise

    raise last_error if last_error else Exception("Connection failed after all retries")


def check_database(database_url: str) -> dict:
    """
    Single quick probe used by the /health endpoints

    Returns:
        {"status": "connected"|"disconnected", "latency_ms": float|None, "error": str|None}
    """
    latency_ms = None
    error = None

    try:
        conn = get_db_connection_with_retry(database_url, max_retries=1)
        try:
            cursor = conn.cursor()
            start = time.time()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            latency_ms = round((time.time() - start) * 1000, 2)
            cursor.close()
        finally:
            conn.close()
        status = "connected"
    except Exception as e:
        status = "disconnected"
        error = str(e)

    return {"status": status, "latency_ms": latency_ms, "error": error}


# ============================================================================
# SQLAlchemy (schema creation)
# ============================================================================

def build_engine(database_url: str) -> Engine:
    """SQLAlchemy engine for a service database"""
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verificar conexión antes de usar
        pool_size=5,
        max_overflow=10,
    )


def init_schema(database_url: str, metadata, max_retries=6, retry_delay=1.0):
    """
    Wait for the database and create any missing tables

    The database container can accept TCP connections before it accepts
    queries, so the first connection goes through the retry helper.
    """
    conn = get_db_connection_with_retry(
        database_url,
        max_retries=max_retries,
        retry_delay=retry_delay
    )
    conn.close()

    engine = build_engine(database_url)
    try:
        metadata.create_all(bind=engine)
        logger.info(f"Schema ready: {', '.join(sorted(metadata.tables))}")
    finally:
        engine.dispose()
