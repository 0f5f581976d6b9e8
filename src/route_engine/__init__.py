"""Route planning and geocoding engine for appointment scheduling."""

__version__ = "0.1.0"
