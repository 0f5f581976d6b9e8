"""Exceptions raised by the routing and geocoding services."""

from __future__ import annotations

from typing import Sequence


class RouteProviderError(Exception):
    """A routing provider could not produce a usable route."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"[{provider}] {message}")
        self.provider = provider
        self.message = message


class GeocodeError(Exception):
    """Geocoding failed for a query."""

    def __init__(
        self,
        message: str,
        *,
        details: Sequence[str] | None = None,
        query: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details or [])
        self.query = query
        self.status_code = status_code
