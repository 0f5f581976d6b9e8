"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import LatLng, RouteLeg, RouteProvider, RouteRequest, RouteResult, RouteStep
from ...schemas.providers import OSRMLeg, OSRMRouteResponse
from ..http import open_client
from .polyline import decode_polyline
from .segments import build_segments
from .stops import prepare_stops, total_service_minutes

logger = logging.getLogger(__name__)


def leg_geometry(leg: OSRMLeg) -> list[LatLng]:
    """Decode a leg's own path, stitching step geometries when the leg has none."""
    if leg.geometry:
        return decode_polyline(leg.geometry)

    coords: list[LatLng] = []
    for step in leg.steps:
        if not step.geometry:
            continue
        decoded = decode_polyline(step.geometry)
        # Consecutive steps share their boundary point.
        if coords and decoded and coords[-1] == decoded[0]:
            decoded = decoded[1:]
        coords.extend(decoded)
    return coords


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout or settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self._client = client

    async def route(self, coordinates: Sequence[LatLng]) -> OSRMRouteResponse:
        """Get route geometry between coordinates using OSRM route endpoint.

        Args:
            coordinates: Sequence of (lat, lon) tuples for the route waypoints

        Returns:
            Parsed OSRM response with at least one route.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        params = {
            "overview": "full",
            "steps": "true",
            "annotations": "true",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        async with open_client(self._client, base_url=self.base_url, timeout=self.timeout) as client:
            attempt = 0
            while True:
                try:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
                    data = OSRMRouteResponse.model_validate(response.json())
                    if data.code != "Ok":
                        raise ValueError(f"OSRM route request failed: {data.message or data.code}")
                    if not data.routes:
                        raise ValueError("OSRM returned no routes.")
                    return data
                except httpx.HTTPStatusError as e:
                    # Client errors (bad coordinates, NoRoute) won't improve on retry
                    if e.response.status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    await asyncio.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    await asyncio.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to OSRM service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    await asyncio.sleep(wait_time)

    async def plan(self, request: RouteRequest) -> RouteResult:
        """Plan a route through all stops and normalize the OSRM answer."""
        stops = prepare_stops(request)
        data = await self.route([(stop.latitude, stop.longitude) for stop in stops])
        osrm_route = data.routes[0]

        coordinates = decode_polyline(osrm_route.geometry)
        if len(coordinates) < 2:
            raise ValueError("OSRM route geometry is empty.")

        legs = [
            RouteLeg(
                distance_km=round(leg.distance / 1000, 1),
                duration_minutes=int(round(leg.duration / 60)),
                coordinates=leg_geometry(leg),
            )
            for leg in osrm_route.legs
        ]
        steps = [
            RouteStep(
                instruction=step.maneuver.type if step.maneuver else "",
                distance_km=round(step.distance / 1000, 2),
                duration_minutes=int(round(step.duration / 60)),
            )
            for leg in osrm_route.legs
            for step in leg.steps
        ]

        return RouteResult(
            waypoints=stops,
            coordinates=coordinates,
            distance_km=round(osrm_route.distance / 1000, 1),
            duration_minutes=int(round(osrm_route.duration / 60)),
            segments=build_segments(stops, coordinates, legs),
            service_time_total_minutes=total_service_minutes(stops),
            provider=RouteProvider.OSRM,
            steps=steps,
        )


async def check_health(base_url: str | None = None, profile: str | None = None) -> bool:
    """Check OSRM service health by routing between two fixed points.

    Public OSRM endpoints may not have a /health endpoint, so we test
    connectivity with a minimal route request.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    # Two points in Kuala Lumpur
    test_coords = "101.6869,3.1390;101.6958,3.1466"
    url = f"{base.rstrip('/')}/route/v1/{profile or settings.osrm_profile}/{test_coords}"
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(url, params={"overview": "false"})
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError):
        return False
    return isinstance(data, dict) and data.get("code") == "Ok"
