"""Shared async HTTP client handling for the upstream adapters."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

CONNECT_TIMEOUT_SECONDS = 5.0


@asynccontextmanager
async def open_client(
    client: httpx.AsyncClient | None,
    *,
    base_url: str,
    timeout: float,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout, connect=min(timeout, CONNECT_TIMEOUT_SECONDS)),
    ) as owned:
        yield owned


def error_message(response: httpx.Response) -> str:
    """Best-effort human readable error from an upstream error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase
