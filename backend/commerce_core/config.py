"""
Base configuration shared by the services

Both services read the same PostgreSQL variables that the compose file and
the CI workflow inject (POSTGRES_HOST, POSTGRES_PORT, ...).
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings


class DatabaseSettings(BaseSettings):
    """Settings common to every service backed by PostgreSQL"""

    # API Settings
    API_TITLE: str = "Commerce Service"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = ""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "postgres"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    DATABASE_URL: Optional[str] = None

    # Startup: how long to keep trying before giving up on the database
    DB_CONNECT_RETRIES: int = 6
    DB_CONNECT_RETRY_DELAY: float = 1.0

    LOG_LEVEL: str = "INFO"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,http://127.0.0.1:3000" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def database_url(self) -> str:
        """DATABASE_URL if set, otherwise built from the POSTGRES_* variables"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        if self.ALLOWED_ORIGINS.strip() == "*":
            return ["*"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
