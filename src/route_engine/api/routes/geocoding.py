"""Geocoding endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.geocoding import (
    BulkGeocodeItemModel,
    BulkGeocodeRequest,
    BulkGeocodeResponse,
    GeocodeRequest,
    GeocodeResponseModel,
    ReverseGeocodeRequest,
    ReverseGeocodeResponseModel,
)
from ...services.errors import GeocodeError
from ...services.geocoding.client import GeocodeClient

router = APIRouter(prefix="/geocode", tags=["geocoding"])


def get_geocode_client() -> GeocodeClient:
    return GeocodeClient()


def _http_error(exc: GeocodeError) -> HTTPException:
    not_found = exc.status_code == status.HTTP_404_NOT_FOUND
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND if not_found else status.HTTP_502_BAD_GATEWAY,
        detail={"message": exc.message, "query": exc.query, "suggestions": exc.details},
    )


@router.post("", response_model=GeocodeResponseModel, status_code=status.HTTP_200_OK)
async def geocode(payload: GeocodeRequest) -> GeocodeResponseModel:
    try:
        result = await get_geocode_client().geocode_address(payload.address, payload.options.to_options())
    except GeocodeError as exc:
        raise _http_error(exc) from exc
    return GeocodeResponseModel.from_domain(result)


@router.post("/reverse", response_model=ReverseGeocodeResponseModel, status_code=status.HTTP_200_OK)
async def reverse_geocode(payload: ReverseGeocodeRequest) -> ReverseGeocodeResponseModel:
    try:
        result = await get_geocode_client().reverse_geocode(
            payload.longitude,
            payload.latitude,
            language=payload.language,
            types=payload.types,
            limit=payload.limit,
        )
    except GeocodeError as exc:
        raise _http_error(exc) from exc
    return ReverseGeocodeResponseModel.from_domain(result)


@router.post("/bulk", response_model=BulkGeocodeResponse, status_code=status.HTTP_200_OK)
async def bulk_geocode(payload: BulkGeocodeRequest) -> BulkGeocodeResponse:
    """Geocode several addresses; failures are reported per address."""
    try:
        items = await get_geocode_client().bulk_geocode(payload.addresses, payload.options.to_options())
    except GeocodeError as exc:
        raise _http_error(exc) from exc
    succeeded = sum(1 for item in items if item.success)
    return BulkGeocodeResponse(
        total=len(items),
        succeeded=succeeded,
        failed=len(items) - succeeded,
        results=[BulkGeocodeItemModel.from_domain(item) for item in items],
    )
