"""
Order Service configuration
"""
from commerce_core.config import DatabaseSettings


class Settings(DatabaseSettings):
    """Configuración del servicio de órdenes"""

    API_TITLE: str = "Order Service"
    API_DESCRIPTION: str = "Places orders against the product catalog and tracks their status"

    POSTGRES_DB: str = "orders"

    # Product Service (inside compose: http://product_service:8000)
    PRODUCT_SERVICE_URL: str = "http://localhost:8000"
    PRODUCT_SERVICE_TIMEOUT: float = 5.0


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings"""
    return settings
