"""Geocoding service exports."""

from .client import GeocodeClient, GeocodeOptions, accuracy_level_for, resolve_accuracy_level
from .normalize import normalize_address

__all__ = [
    "GeocodeClient",
    "GeocodeOptions",
    "accuracy_level_for",
    "resolve_accuracy_level",
    "normalize_address",
]
