"""
Health Check Routes
Liveness for the load balancer, readiness against the claims database
Source: https://microservices.io/patterns/observability/health-check-api.html
"""

import time
from typing import Any

from fastapi import APIRouter

from claimflow import __version__
from claimflow.api.config import get_settings
from claimflow.db.connection import check_db_connection
from claimflow.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "claimflow-api"


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Liveness only; never touches the database."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": __version__,
    }


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """
    Readiness check.

    The claims API is unusable without PostgreSQL, so an unreachable
    database makes the whole service unhealthy.
    """
    started = time.perf_counter()
    db_healthy = await check_db_connection()
    latency_ms = round((time.perf_counter() - started) * 1000, 1)

    if not db_healthy:
        logger.warning(f"Claims database unreachable after {latency_ms} ms")

    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "service": SERVICE_NAME,
        "version": __version__,
        "environment": get_settings().ENVIRONMENT,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
            "database_latency_ms": latency_ms,
        },
    }
