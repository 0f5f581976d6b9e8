"""Local simulated route used when every real provider is unavailable.

Geometry is a straight-line interpolation between stops and timing is a flat
minutes-per-km estimate. Some segments are randomly marked as returns so the
map shows its overlap styling; the random source is injected so results can
be reproduced.
"""

from __future__ import annotations

import random
from typing import Sequence

from ...config import settings
from ...models.domain import LatLng, RouteProvider, RouteRequest, RouteResult, RouteSegment, Waypoint
from ..geospatial import haversine_km, interpolate, path_length_km
from .segments import PALETTE_SIZE
from .stops import prepare_stops, reindex, total_service_minutes


def nearest_neighbour_order(stops: Sequence[Waypoint]) -> list[Waypoint]:
    """Greedy visiting order keeping the first stop fixed."""
    if len(stops) <= 2:
        return list(stops)
    ordered = [stops[0]]
    remaining = list(stops[1:])
    while remaining:
        current = ordered[-1]
        nearest = min(
            remaining,
            key=lambda stop: haversine_km(current.latitude, current.longitude, stop.latitude, stop.longitude),
        )
        remaining.remove(nearest)
        ordered.append(nearest)
    return ordered


def _point(stop: Waypoint) -> LatLng:
    return (stop.latitude, stop.longitude)


def generate_mock_route(
    request: RouteRequest,
    *,
    rng: random.Random | None = None,
    interpolation_steps: int | None = None,
    minutes_per_km: float | None = None,
    return_probability: float | None = None,
) -> RouteResult:
    rng = rng or random.Random()
    steps = interpolation_steps if interpolation_steps is not None else settings.mock_interpolation_steps
    minutes_per_km = minutes_per_km if minutes_per_km is not None else settings.mock_minutes_per_km
    return_probability = (
        return_probability if return_probability is not None else settings.mock_return_probability
    )

    stops = prepare_stops(request)
    if request.optimize:
        stops = reindex(nearest_neighbour_order(stops))

    coordinates: list[LatLng] = []
    segments: list[RouteSegment] = []
    for index, (start, end) in enumerate(zip(stops, stops[1:])):
        hop = [_point(start), *interpolate(_point(start), _point(end), steps)]
        coordinates.extend(hop)

        distance = haversine_km(start.latitude, start.longitude, end.latitude, end.longitude)
        segments.append(
            RouteSegment(
                index=index,
                coordinates=[*hop, _point(end)],
                distance_km=round(distance, 1),
                duration_minutes=int(round(distance * minutes_per_km)),
                start_waypoint=start,
                end_waypoint=end,
                is_return_segment=index > 0 and rng.random() < return_probability,
                suggested_color_index=index % PALETTE_SIZE,
            )
        )
    if stops:
        coordinates.append(_point(stops[-1]))

    distance_km = path_length_km([_point(stop) for stop in stops])
    return RouteResult(
        waypoints=stops,
        coordinates=coordinates,
        distance_km=round(distance_km, 1),
        duration_minutes=int(round(distance_km * minutes_per_km)),
        segments=segments,
        service_time_total_minutes=total_service_minutes(stops),
        provider=RouteProvider.MOCK,
        request=request,
    )
