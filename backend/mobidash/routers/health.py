"""
Health check endpoints for monitoring and orchestration.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from mobidash.dependencies import Services, get_services

logger = structlog.get_logger()
router = APIRouter()


@router.get("/health/live")
async def liveness_check(services: Services = Depends(get_services)):
    """Basic liveness check - is the process running?"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "service": services.settings.app_name,
        "version": services.settings.app_version,
    }


@router.get("/health/ready")
async def readiness_check(services: Services = Depends(get_services)):
    """Readiness check - can we serve traffic?"""
    checks = {
        "http_client": not services.http_client.is_closed,
        "operators_loaded": len(services.operators.operators) > 0,
    }

    all_healthy = all(checks.values())
    if not all_healthy:
        logger.warning("Readiness check failed", checks=checks)

    return {
        "status": "healthy" if all_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc),
        "checks": checks,
        "cached_documents": len(services.feed_cache),
    }
