"""Per-leg route segmentation and backtracking (overlap) detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ...config import settings
from ...models.domain import LatLng, RouteLeg, RouteSegment, Waypoint
from ..geospatial import find_closest_index, haversine_km

logger = logging.getLogger(__name__)

PALETTE_SIZE = 7
# Rough travel estimate used when a provider gives no per-leg timing.
MINUTES_PER_KM_ESTIMATE = 2.0
MIN_OVERLAP_PATH_POINTS = 5


@dataclass(frozen=True, slots=True)
class OverlapParams:
    """Tunables of the overlap heuristic.

    threshold_degrees: planar distance under which two samples are considered
    the same place (1e-4 deg is roughly 10 m). sample_count: each path is
    sampled at stride len // sample_count. min_points: matches needed, capped
    at a tenth of the shorter path.
    """

    threshold_degrees: float = 1e-4
    sample_count: int = 20
    min_points: int = 5

    @classmethod
    def from_settings(cls) -> "OverlapParams":
        return cls(
            threshold_degrees=settings.overlap_threshold_degrees,
            sample_count=settings.overlap_sample_count,
            min_points=settings.overlap_min_points,
        )


def _sample(coords: Sequence[LatLng], sample_count: int) -> np.ndarray:
    stride = max(1, len(coords) // sample_count)
    return np.asarray(coords, dtype=float)[::stride]


def has_significant_overlap(
    coords_a: Sequence[LatLng],
    coords_b: Sequence[LatLng],
    params: OverlapParams | None = None,
) -> bool:
    """Approximate test for two paths retracing the same ground.

    Both paths are sampled, and the pair overlaps when enough samples of
    either path lie within the threshold of some sample of the other. The
    result does not depend on argument order.

    The required count is capped at a tenth of the shorter path, so two
    consecutive paths of 5 to 10 points that only share their joining stop
    already count as overlapping.
    """
    params = params or OverlapParams()
    if len(coords_a) < MIN_OVERLAP_PATH_POINTS or len(coords_b) < MIN_OVERLAP_PATH_POINTS:
        return False

    required = min(params.min_points, min(len(coords_a), len(coords_b)) / 10)
    samples_a = _sample(coords_a, params.sample_count)
    samples_b = _sample(coords_b, params.sample_count)

    deltas = samples_a[:, None, :] - samples_b[None, :, :]
    close = np.sqrt((deltas ** 2).sum(axis=2)) < params.threshold_degrees

    matches_a = int(close.any(axis=1).sum())
    matches_b = int(close.any(axis=0).sum())
    return max(matches_a, matches_b) >= required


def _slice_between(coordinates: Sequence[LatLng], start: Waypoint, end: Waypoint) -> list[LatLng]:
    start_idx = find_closest_index(coordinates, start.latitude, start.longitude)
    end_idx = find_closest_index(coordinates, end.latitude, end.longitude)
    sliced = list(coordinates[min(start_idx, end_idx) : max(start_idx, end_idx) + 1])
    if len(sliced) < 2:
        return [(start.latitude, start.longitude), (end.latitude, end.longitude)]
    return sliced


def build_segments(
    waypoints: Sequence[Waypoint],
    coordinates: Sequence[LatLng],
    legs: Sequence[RouteLeg] | None = None,
    *,
    params: OverlapParams | None = None,
) -> list[RouteSegment]:
    """Split a route into one segment per pair of consecutive waypoints.

    When provider legs line up with the waypoints each leg's own geometry,
    distance and duration are used. Otherwise every waypoint is snapped to its
    nearest path sample and the path is sliced between them; a pair of stops
    that snap to the same sample gets a straight two-point segment.
    """
    if len(waypoints) < 2:
        return []

    params = params or OverlapParams.from_settings()
    use_legs = bool(legs) and len(legs) == len(waypoints) - 1
    if legs and not use_legs:
        logger.debug(
            f"Ignoring {len(legs)} provider legs for {len(waypoints)} waypoints; approximating segments"
        )

    segments: list[RouteSegment] = []
    for index in range(len(waypoints) - 1):
        start, end = waypoints[index], waypoints[index + 1]

        if use_legs:
            leg = legs[index]
            segment_coords = list(leg.coordinates) or _slice_between(coordinates, start, end)
            distance_km = leg.distance_km
            duration_minutes = leg.duration_minutes
        else:
            segment_coords = _slice_between(coordinates, start, end)
            distance = haversine_km(start.latitude, start.longitude, end.latitude, end.longitude)
            distance_km = round(distance, 1)
            duration_minutes = int(round(distance * MINUTES_PER_KM_ESTIMATE))

        is_return = any(
            has_significant_overlap(segment_coords, earlier.coordinates, params) for earlier in segments
        )
        segments.append(
            RouteSegment(
                index=index,
                coordinates=segment_coords,
                distance_km=distance_km,
                duration_minutes=duration_minutes,
                start_waypoint=start,
                end_waypoint=end,
                is_return_segment=is_return,
                suggested_color_index=index % PALETTE_SIZE,
            )
        )
    return segments
