"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...services.map_config import get_provider_config
from ...services.routing.osrm_client import check_health as osrm_health_check

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
async def health_osrm() -> dict:
    """Check OSRM service health."""
    config = get_provider_config()
    if not config.osrm_enabled:
        return {"service": "osrm", "enabled": False, "healthy": False}
    healthy = await osrm_health_check(config.osrm_base_url, config.osrm_profile)
    return {"service": "osrm", "enabled": True, "healthy": healthy}
