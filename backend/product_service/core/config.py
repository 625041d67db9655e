"""
Product Service configuration
"""
from typing import Optional

from commerce_core.config import DatabaseSettings


class Settings(DatabaseSettings):
    """Configuración del servicio de productos"""

    API_TITLE: str = "Product Service"
    API_DESCRIPTION: str = "Manages the product catalog, stock levels and product images"

    POSTGRES_DB: str = "products"

    # Azure Blob Storage (product images)
    AZURE_STORAGE_ACCOUNT_NAME: Optional[str] = None
    AZURE_STORAGE_ACCOUNT_KEY: Optional[str] = None
    AZURE_STORAGE_CONTAINER_NAME: str = "product-images"
    AZURE_SAS_TOKEN_EXPIRY_HOURS: int = 24

    # Upload limits
    MAX_IMAGE_SIZE_MB: int = 10

    @property
    def storage_configured(self) -> bool:
        """True when account name, key and container are all set"""
        return bool(
            self.AZURE_STORAGE_ACCOUNT_NAME
            and self.AZURE_STORAGE_ACCOUNT_KEY
            and self.AZURE_STORAGE_CONTAINER_NAME
        )


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings"""
    return settings
