"""Client for the hosted primary routing endpoint."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import RouteProvider, RouteRequest, RouteResult, RouteStep, Waypoint
from ...schemas.providers import PrimaryRoute, PrimaryRouteEnvelope, PrimaryWaypoint
from ..geospatial import path_length_km
from ..http import open_client
from .segments import MINUTES_PER_KM_ESTIMATE, build_segments
from .stops import CUSTOMER_LOCATION_ID, prepare_stops, reindex, total_service_minutes

ROUTE_PATH = "/api/map/route"

logger = logging.getLogger(__name__)


def _apply_provider_order(stops: list[Waypoint], ordered: Sequence[PrimaryWaypoint]) -> list[Waypoint]:
    """Reorder stops to match the provider's optimized order when it reports one."""
    by_id = {stop.id: stop for stop in stops}
    ordered_ids = [wp.id for wp in ordered if wp.id is not None]
    if len(ordered_ids) != len(stops) or set(ordered_ids) != set(by_id):
        return stops
    return reindex([by_id[stop_id] for stop_id in ordered_ids])


def _parse_route(data: object) -> PrimaryRoute:
    if not isinstance(data, dict):
        raise ValueError("Primary routing response is not a JSON object.")
    if "route" in data or "success" in data:
        envelope = PrimaryRouteEnvelope.model_validate(data)
        if not envelope.success or envelope.route is None:
            raise ValueError(envelope.message or envelope.error or "Primary provider returned no route.")
        return envelope.route
    return PrimaryRoute.model_validate(data)


class PrimaryRouteClient:
    """Calls the backend-proxied hosted routing API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout or settings.primary_timeout_seconds
        self._client = client

    def _build_payload(self, request: RouteRequest) -> dict:
        # Per-stop service time as resolved for the route; the start point has none.
        stops = [stop for stop in prepare_stops(request) if not stop.is_customer_location]
        payload: dict = {
            "waypoints": [
                {
                    "id": stop.id,
                    "latitude": stop.latitude,
                    "longitude": stop.longitude,
                    "serviceTime": stop.service_time_minutes,
                }
                for stop in stops
            ],
            "serviceTimes": [stop.service_time_minutes for stop in stops],
            "optimize": request.optimize,
        }
        if request.start_location:
            lat, lng = request.start_location
            payload["startPoint"] = {"id": CUSTOMER_LOCATION_ID, "latitude": lat, "longitude": lng}
        return payload

    async def plan(self, request: RouteRequest) -> RouteResult:
        """Request a route and normalize it into a RouteResult.

        Raises httpx.HTTPError on transport/status failures and ValueError when
        the response carries no usable route.
        """
        async with open_client(self._client, base_url=self.base_url, timeout=self.timeout) as client:
            response = await client.post(ROUTE_PATH, json=self._build_payload(request))
            response.raise_for_status()
            route = _parse_route(response.json())

        coordinates = [(float(point[0]), float(point[1])) for point in route.coordinates if len(point) >= 2]
        if len(coordinates) < 2:
            raise ValueError("Primary provider returned no route geometry.")

        stops = _apply_provider_order(prepare_stops(request), route.waypoints)
        distance_km = route.distance if route.distance is not None else path_length_km(coordinates)
        duration_minutes = (
            int(round(route.duration))
            if route.duration is not None
            else int(round(distance_km * MINUTES_PER_KM_ESTIMATE))
        )

        return RouteResult(
            waypoints=stops,
            coordinates=coordinates,
            distance_km=round(distance_km, 1),
            duration_minutes=duration_minutes,
            segments=build_segments(stops, coordinates),
            service_time_total_minutes=total_service_minutes(stops),
            provider=RouteProvider.PRIMARY,
            steps=[
                RouteStep(
                    instruction=step.instruction,
                    distance_km=round(step.distance, 2),
                    duration_minutes=int(round(step.duration)),
                )
                for step in route.steps
            ],
        )
