"""Request normalization shared by all routing providers."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Sequence

from ...models.domain import LatLng, RouteRequest, Waypoint

CUSTOMER_LOCATION_ID = "customer-location"


def coerce_minutes(value: Any) -> int:
    """Parse a service duration; anything unparsable counts as zero."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        minutes = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, minutes)


def build_request(
    waypoints: Sequence[Waypoint],
    optimize: bool = True,
    start_location: LatLng | None = None,
    service_times: Sequence[Any] = (),
) -> RouteRequest:
    stops = len(waypoints) + (1 if start_location else 0)
    if stops < 2:
        raise ValueError("At least two stops are required to plan a route.")
    return RouteRequest(
        waypoints=list(waypoints),
        optimize=optimize,
        start_location=start_location,
        service_times=[coerce_minutes(value) for value in service_times],
    )


def prepare_stops(request: RouteRequest) -> list[Waypoint]:
    """All stops in visiting order, start location first, with index and service time resolved.

    Service times are matched to waypoints by position; the start location
    never carries service time.
    """
    stops: list[Waypoint] = []
    if request.start_location:
        lat, lng = request.start_location
        stops.append(Waypoint(id=CUSTOMER_LOCATION_ID, latitude=lat, longitude=lng, is_customer_location=True))
    stops.extend(request.waypoints)

    offset = 1 if request.start_location else 0
    prepared = []
    for index, stop in enumerate(stops):
        position = index - offset
        if stop.is_customer_location:
            service = 0
        elif 0 <= position < len(request.service_times):
            service = request.service_times[position]
        else:
            service = stop.service_time_minutes
        prepared.append(replace(stop, index=index, service_time_minutes=service))
    return prepared


def reindex(stops: Sequence[Waypoint]) -> list[Waypoint]:
    return [replace(stop, index=index) for index, stop in enumerate(stops)]


def total_service_minutes(stops: Sequence[Waypoint]) -> int:
    return sum(stop.service_time_minutes for stop in stops)
