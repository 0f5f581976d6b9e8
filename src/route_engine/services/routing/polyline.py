"""Encoded polyline codec used by OSRM and Mapbox route geometry."""

from __future__ import annotations

from typing import Iterable


def _read_value(encoded: str, index: int) -> tuple[int | None, int]:
    """Read one zig-zag varint starting at index.

    Returns (None, len) when the string ends before the value is complete.
    """
    shift = 0
    result = 0
    length = len(encoded)
    while index < length:
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            value = ~(result >> 1) if (result & 1) else (result >> 1)
            return value, index
    return None, length


def decode_polyline(encoded: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode a polyline string to a list of (lat, lon) coordinates.

    Args:
        encoded: Encoded polyline string
        precision: Number of decimal places the values were scaled by (5 for OSRM/Google, 6 for polyline6)

    Returns:
        List of (latitude, longitude) tuples. A truncated trailing pair is dropped.
    """
    coordinates: list[tuple[float, float]] = []
    factor = 10 ** precision
    index = 0
    lat = 0
    lon = 0

    while index < len(encoded):
        dlat, index = _read_value(encoded, index)
        dlon, index = _read_value(encoded, index)
        if dlat is None or dlon is None:
            break
        lat += dlat
        lon += dlon
        coordinates.append((lat / factor, lon / factor))

    return coordinates


def _write_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(coordinates: Iterable[tuple[float, float]], precision: int = 5) -> str:
    """Encode (lat, lon) coordinates with the standard polyline algorithm."""
    factor = 10 ** precision
    parts = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in coordinates:
        lat_i = int(round(lat * factor))
        lon_i = int(round(lon * factor))
        parts.append(_write_value(lat_i - prev_lat))
        parts.append(_write_value(lon_i - prev_lon))
        prev_lat, prev_lon = lat_i, lon_i
    return "".join(parts)
