"""Provider configuration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...models.domain import ProviderConfig
from ...services.map_config import resolver

router = APIRouter(prefix="/map-config", tags=["map-config"])


def _describe(config: ProviderConfig) -> dict:
    # The access token never leaves the server.
    return {
        "primary_enabled": config.primary_enabled,
        "primary_token_configured": bool(config.primary_token),
        "osrm_enabled": config.osrm_enabled,
        "osrm_base_url": config.osrm_base_url,
        "osrm_profile": config.osrm_profile,
        "use_mock_on_failure": config.use_mock_on_failure,
        "log_performance": config.log_performance,
    }


@router.get("", status_code=status.HTTP_200_OK)
def get_map_config() -> dict:
    return _describe(resolver.config)


@router.post("/refresh", status_code=status.HTTP_200_OK)
async def refresh_map_config() -> dict:
    """Fetch the remote map config again; local settings stay when it fails."""
    applied = await resolver.init_map_config()
    return {"applied": applied, **_describe(resolver.config)}
