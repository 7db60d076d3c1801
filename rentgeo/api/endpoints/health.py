"""Health check endpoint for service monitoring.

This module provides health and readiness endpoints for
container orchestration and monitoring systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from loguru import logger

from rentgeo.api.deps import StoreDep
from rentgeo.core.config import settings

router = APIRouter(tags=["Health"])

VERSION = "0.1.0"


@router.get(
    "/health",
    response_model=Dict[str, Any],
    summary="Health Check",
    description="Check if the API service is running.",
)
async def health_check() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.APP_ENV,
        "store_backend": settings.STORE_BACKEND,
        "version": VERSION,
    }


@router.get(
    "/health/ready",
    response_model=Dict[str, Any],
    summary="Readiness Check",
    description="Check if the service is ready to accept requests (including the spatial store).",
)
async def readiness_check(store: StoreDep) -> Dict[str, Any]:
    """Perform a readiness check including a spatial store round-trip.

    Args:
        store: Spatial store for this request.

    Returns:
        Dictionary with detailed service and dependency status.
    """
    store_status = "healthy"
    store_message = "Connected"

    try:
        await store.has_properties()
    except Exception as e:
        logger.warning(f"Readiness probe failed: {e}")
        store_status = "unhealthy"
        store_message = str(e)

    return {
        "status": "ready" if store_status == "healthy" else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "store": {
                "backend": settings.STORE_BACKEND,
                "status": store_status,
                "message": store_message,
            },
        },
    }
