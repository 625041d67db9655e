"""
Order Service - Backend API
Order placement and tracking, backed by the Product Service
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
load_dotenv(Path.cwd() / '.env')

from commerce_core.health import build_health_router
from commerce_core.logging_config import configure_logging
from order_service.api import orders
from order_service.core.config import settings
from order_service.core.database import init_db

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.API_TITLE} (database {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB})")
    logger.info(f"Product Service at {settings.PRODUCT_SERVICE_URL}")
    init_db()
    yield
    logger.info(f"Stopping {settings.API_TITLE}")


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

app.include_router(
    build_health_router("Order Service", settings.API_VERSION, lambda: settings.database_url)
)
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
