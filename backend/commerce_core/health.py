"""
Root and health endpoints shared by the services
"""
import time
from typing import Callable

from fastapi import APIRouter

from commerce_core.database import check_database


def build_health_router(service_name: str, version: str, database_url: Callable[[], str]) -> APIRouter:
    """
    Build a router exposing GET / and GET /health

    database_url is a callable so tests can swap settings after import.
    """
    router = APIRouter(tags=["Health"])

    @router.get("/")
    async def root():
        """Endpoint raíz - Verificación de estado de la API"""
        return {
            "message": f"Welcome to the {service_name}!",
            "service": service_name,
            "status": "online",
            "version": version
        }

    @router.get("/health")
    async def health():
        """Health check - tests database connectivity with a single attempt"""
        start_time = time.time()
        database = check_database(database_url())
        total_latency_ms = round((time.time() - start_time) * 1000, 2)

        return {
            "status": "healthy" if database["status"] == "connected" else "degraded",
            "service": service_name,
            "version": version,
            "database": database,
            "total_latency_ms": total_latency_ms
        }

    return router
