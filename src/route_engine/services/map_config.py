"""Remote map provider configuration."""

from __future__ import annotations

import logging
from dataclasses import replace

import httpx

from ..config import settings
from ..models.domain import ProviderConfig
from ..schemas.providers import MapConfigPayload
from .http import open_client

logger = logging.getLogger(__name__)


class MapConfigResolver:
    """Holds the active ProviderConfig and refreshes it from the map backend.

    The remote config is fetched once at startup. When the fetch fails the
    static defaults stay in force; nothing retries automatically.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ProviderConfig.from_settings(settings)
        self.base_url = base_url or settings.api_base_url
        self._client = client

    async def init_map_config(self) -> bool:
        """Fetch the remote config; returns True when it was applied."""
        logger.info(
            f"Fetching map config from {self.base_url}{settings.map_config_path} "
            f"(primary_enabled={self.config.primary_enabled}, osrm_enabled={self.config.osrm_enabled})"
        )
        try:
            async with open_client(
                self._client, base_url=self.base_url, timeout=settings.config_timeout_seconds
            ) as client:
                response = await client.get(settings.map_config_path)
                response.raise_for_status()
                payload = MapConfigPayload.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                f"Could not fetch map config, keeping local settings "
                f"(primary_enabled={self.config.primary_enabled}, osrm_enabled={self.config.osrm_enabled}): {exc}"
            )
            return False

        token = payload.mapbox.accessToken if payload.mapbox else None
        if not token:
            logger.warning("Map config from server is incomplete (no access token); keeping local settings")
            return False

        osrm_enabled = self.config.osrm_enabled
        if payload.osrm and payload.osrm.enabled is not None:
            osrm_enabled = payload.osrm.enabled

        self.config = replace(self.config, primary_enabled=True, primary_token=token, osrm_enabled=osrm_enabled)
        logger.info(f"Map config applied: primary_enabled=True, osrm_enabled={osrm_enabled}")
        return True


resolver = MapConfigResolver()


def get_provider_config() -> ProviderConfig:
    return resolver.config
