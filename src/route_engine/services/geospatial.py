"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from shapely.geometry import Point, box

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def path_length_km(points: Sequence[tuple[float, float]]) -> float:
    """Sum of haversine distances along consecutive (lat, lon) points."""

    return sum(
        haversine_km(lat1, lon1, lat2, lon2)
        for (lat1, lon1), (lat2, lon2) in zip(points, points[1:])
    )


def find_closest_index(coordinates: Sequence[tuple[float, float]], lat: float, lng: float) -> int:
    """Index of the path sample nearest to (lat, lng).

    Uses squared planar distance in degrees; only meant for snapping a stop
    onto a nearby path sample.
    """

    if len(coordinates) == 0:
        return 0
    points = np.asarray(coordinates, dtype=float)
    squared = (points[:, 0] - lat) ** 2 + (points[:, 1] - lng) ** 2
    return int(np.argmin(squared))


def interpolate(
    start: tuple[float, float], end: tuple[float, float], steps: int
) -> list[tuple[float, float]]:
    """Return `steps` evenly spaced points strictly between start and end (linear in lat/lng)."""

    (lat1, lon1), (lat2, lon2) = start, end
    points = []
    for step in range(1, steps + 1):
        ratio = step / (steps + 1)
        points.append((lat1 + (lat2 - lat1) * ratio, lon1 + (lon2 - lon1) * ratio))
    return points


def within_bounds(lat: float, lon: float, bounds: tuple[float, float, float, float]) -> bool:
    """Return True if the point lies inside (min_lat, min_lon, max_lat, max_lon)."""

    min_lat, min_lon, max_lat, max_lon = bounds
    area = box(min_lon, min_lat, max_lon, max_lat)
    return area.covers(Point(lon, lat))
