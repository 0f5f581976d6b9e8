"""Route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import RoutePlanRequest, RoutePlanResponse
from ...services.errors import RouteProviderError
from ...services.map_config import get_provider_config
from ...services.routing.chain import RouteProviderChain

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


def get_route_chain() -> RouteProviderChain:
    return RouteProviderChain(get_provider_config())


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
async def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    """Plan a route through the given stops, falling back across providers."""
    waypoints, start_location = payload.to_domain()
    try:
        result = await get_route_chain().plan_route(
            waypoints,
            optimize=payload.optimize,
            start_location=start_location,
            service_times=payload.service_times,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RouteProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"provider": exc.provider, "message": exc.message},
        ) from exc
    return RoutePlanResponse.from_domain(result)
