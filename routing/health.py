"""Health, readiness and liveness endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from config import SERVICE_NAME, get_service_version
from routing.registry import ProviderRegistry
from routing.routes import get_registry
from routing.service import check_availability

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(UTC).isoformat()


def overall_status(availability: dict[str, bool]) -> str:
    """healthy when every provider is up, degraded when some are, else unhealthy."""
    if availability and all(availability.values()):
        return "healthy"
    if any(availability.values()):
        return "degraded"
    return "unhealthy"


@router.get("/health", response_model=dict[str, Any])
async def health(registry: ProviderRegistry = Depends(get_registry)):
    """Aggregate provider availability into a service health status."""
    providers = registry.get_all_providers()
    availability = await check_availability(providers)
    checked_at = _now()

    health_status = overall_status(availability)
    body = {
        "status": health_status,
        "timestamp": checked_at,
        "service": SERVICE_NAME,
        "version": get_service_version(),
        "providers": {
            name: {"available": available, "lastChecked": checked_at}
            for name, available in availability.items()
        },
    }
    if health_status == "unhealthy":
        logger.warning("Health check unhealthy: no routing provider available")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body,
        )
    if health_status == "degraded":
        logger.info(
            "Health check degraded: unavailable=%s",
            ", ".join(name for name, ok in availability.items() if not ok),
        )
    return body


@router.get("/ready", response_model=dict[str, Any])
async def ready(registry: ProviderRegistry = Depends(get_registry)):
    """Ready once the registry holds at least one provider."""
    if not len(registry):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not ready",
                "timestamp": _now(),
                "error": "No routing providers registered",
            },
        )
    return {
        "status": "ready",
        "timestamp": _now(),
        "checks": {
            "registry": "ok",
            "defaultProvider": registry.default_provider_name,
        },
    }


@router.get("/live", response_model=dict[str, Any])
async def live():
    return {"status": "alive", "timestamp": _now()}
