"""Route group exports."""

from . import geocoding, health, map_config, routes

__all__ = ["routes", "geocoding", "health", "map_config"]
