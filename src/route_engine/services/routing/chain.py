"""Route planning across the primary API, OSRM and the local fallback."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

import httpx

from ...config import settings
from ...models.domain import (
    LatLng,
    ProviderConfig,
    RoutePlan,
    RouteProvider,
    RouteRequest,
    RouteResult,
    Waypoint,
)
from ..errors import RouteProviderError
from ..http import error_message
from .mock_provider import generate_mock_route
from .osrm_client import OSRMClient
from .primary_client import PrimaryRouteClient
from .stops import build_request

logger = logging.getLogger(__name__)

MOCK_ROUTE_WARNING = "Routing providers are unavailable; the route shown is a simulated approximation."


@dataclass(frozen=True, slots=True)
class ProviderStep:
    """One stage of the fallback policy."""

    name: RouteProvider
    enabled: Callable[[ProviderConfig], bool]
    attempt: Callable[[RouteRequest], Awaitable[RouteResult]]
    timeout_seconds: float | None = None


class RouteProviderChain:
    """Runs provider steps in order and returns the first route produced.

    Steps run strictly one after another. A failing step is logged and the
    next enabled one is tried; only when none succeeds is the last failure
    raised.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        primary: PrimaryRouteClient | None = None,
        osrm: OSRMClient | None = None,
        rng: random.Random | None = None,
        steps: Sequence[ProviderStep] | None = None,
    ) -> None:
        self.config = config
        self.rng = rng or random.Random()
        self._primary = primary
        self._osrm = osrm
        self.steps: tuple[ProviderStep, ...] = tuple(steps) if steps is not None else self._default_steps()

    def _default_steps(self) -> tuple[ProviderStep, ...]:
        return (
            ProviderStep(
                name=RouteProvider.PRIMARY,
                enabled=lambda config: config.primary_enabled,
                attempt=self._attempt_primary,
                timeout_seconds=settings.primary_timeout_seconds,
            ),
            ProviderStep(
                name=RouteProvider.OSRM,
                enabled=lambda config: config.osrm_enabled,
                attempt=self._attempt_osrm,
                timeout_seconds=settings.osrm_timeout_seconds,
            ),
            ProviderStep(
                name=RouteProvider.MOCK,
                enabled=lambda config: config.use_mock_on_failure,
                attempt=self._attempt_mock,
            ),
        )

    async def _attempt_primary(self, request: RouteRequest) -> RouteResult:
        client = self._primary or PrimaryRouteClient()
        return await client.plan(request)

    async def _attempt_osrm(self, request: RouteRequest) -> RouteResult:
        client = self._osrm or OSRMClient(base_url=self.config.osrm_base_url, profile=self.config.osrm_profile)
        return await client.plan(request)

    async def _attempt_mock(self, request: RouteRequest) -> RouteResult:
        return generate_mock_route(request, rng=self.rng)

    async def _run_step(self, step: ProviderStep, request: RouteRequest) -> RouteResult:
        name = step.name.value
        try:
            if step.timeout_seconds:
                return await asyncio.wait_for(step.attempt(request), timeout=step.timeout_seconds)
            return await step.attempt(request)
        except RouteProviderError:
            raise
        except asyncio.TimeoutError as exc:
            raise RouteProviderError(name, f"No response within {step.timeout_seconds:.0f}s.") from exc
        except httpx.HTTPStatusError as exc:
            raise RouteProviderError(
                name, f"HTTP {exc.response.status_code}: {error_message(exc.response)}"
            ) from exc
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            raise RouteProviderError(name, str(exc) or exc.__class__.__name__) from exc
        except Exception as exc:
            logger.exception(f"Unexpected error from {name} route provider: {exc}")
            raise RouteProviderError(name, f"Unexpected error: {exc}") from exc

    async def plan_route(
        self,
        waypoints: Sequence[Waypoint],
        optimize: bool = True,
        start_location: LatLng | None = None,
        service_times: Sequence[Any] = (),
    ) -> RoutePlan:
        """Plan a route, falling back through the enabled providers.

        Raises ValueError for requests with fewer than two stops and the last
        RouteProviderError when every enabled provider failed.
        """
        request = build_request(waypoints, optimize, start_location, service_times)

        last_error: RouteProviderError | None = None
        for step in self.steps:
            if not step.enabled(self.config):
                logger.debug(f"Route provider {step.name.value} disabled, skipping")
                continue

            started = time.perf_counter()
            try:
                result = await self._run_step(step, request)
            except RouteProviderError as exc:
                logger.warning(f"Route provider {exc.provider} failed: {exc.message}")
                last_error = exc
                continue

            if self.config.log_performance:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.info(
                    f"Route planned by {step.name.value} in {elapsed_ms:.0f}ms: "
                    f"{result.distance_km}km, {result.duration_minutes}min travel, "
                    f"{result.service_time_total_minutes}min service, {len(result.coordinates)} points"
                )
            warning = MOCK_ROUTE_WARNING if step.name is RouteProvider.MOCK else None
            return RoutePlan(route=result, provider=step.name, warning=warning)

        if last_error is None:
            last_error = RouteProviderError("none", "No route provider is enabled.")
        logger.error(f"Route planning failed for {len(request.waypoints)} waypoints: {last_error}")
        raise last_error
