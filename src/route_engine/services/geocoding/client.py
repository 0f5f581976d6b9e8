"""Client for the map backend's geocoding endpoints."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import httpx

from ...config import Settings, settings as default_settings
from ...models.domain import (
    AccuracyLevel,
    BulkGeocodeItem,
    GeocodeMeta,
    GeocodeResponse,
    GeocodeResult,
    GeocodeWarning,
    LatLng,
    ReverseGeocodeResult,
)
from ...schemas.providers import (
    BulkGeocodeItemPayload,
    GeocodeErrorPayload,
    GeocodeMetaPayload,
    GeocodeResponsePayload,
    GeocodeResultPayload,
    ReverseGeocodeResponsePayload,
)
from ..errors import GeocodeError
from ..geospatial import within_bounds
from ..http import open_client
from .normalize import normalize_address

GEOCODE_PATH = "/api/map/geocode"
REVERSE_GEOCODE_PATH = "/api/map/reverse-geocode"
BULK_GEOCODE_PATH = "/api/map/geocode/bulk"

LOW_RELIABILITY = "low_reliability"
OUTSIDE_SERVICE_AREA = "outside_service_area"

# Lower bounds of each bucket, most precise first.
ACCURACY_THRESHOLDS = (
    (0.9, AccuracyLevel.VERY_HIGH),
    (0.75, AccuracyLevel.HIGH),
    (0.6, AccuracyLevel.MEDIUM),
    (0.4, AccuracyLevel.LOW),
)

logger = logging.getLogger(__name__)


def accuracy_level_for(score: float | None) -> AccuracyLevel:
    if score is None:
        return AccuracyLevel.UNKNOWN
    for threshold, level in ACCURACY_THRESHOLDS:
        if score >= threshold:
            return level
    return AccuracyLevel.VERY_LOW


def resolve_accuracy_level(score: float | None, reported: str | None) -> AccuracyLevel:
    """Bucket the score, never trusting a reported level above what the score supports."""
    computed = accuracy_level_for(score)
    try:
        upstream = AccuracyLevel(reported) if reported else None
    except ValueError:
        upstream = None
    if upstream is None or computed is AccuracyLevel.UNKNOWN:
        return computed
    return upstream if upstream.rank < computed.rank else computed


@dataclass(slots=True)
class GeocodeOptions:
    language: str = "en"
    autocomplete: Optional[bool] = None
    fuzzy_match: bool = True
    country: str = ""
    types: str = "address,place"
    limit: int = 1
    current_location: Optional[LatLng] = None
    normalize: bool = False

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "language": self.language,
            "autocomplete": self.autocomplete,
            "fuzzyMatch": self.fuzzy_match,
            "country": self.country,
            "types": self.types,
            "limit": self.limit,
        }
        if self.current_location:
            lat, lng = self.current_location
            payload["currentLocation"] = {"latitude": lat, "longitude": lng}
        return payload


def _error_from_response(response: httpx.Response, query: str, fallback: str) -> GeocodeError:
    try:
        payload = GeocodeErrorPayload.model_validate(response.json())
    except ValueError:
        payload = GeocodeErrorPayload()
    return GeocodeError(
        payload.message or payload.error or fallback,
        details=payload.suggestions,
        query=payload.query or query,
        status_code=response.status_code,
    )


class GeocodeClient:
    """Resolves addresses to coordinates (and back) through the map backend."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._client = client

    def _open(self):
        return open_client(
            self._client,
            base_url=self.settings.api_base_url,
            timeout=self.settings.geocode_timeout_seconds,
        )

    def _to_result(self, payload: GeocodeResultPayload, cache_status: str | None) -> GeocodeResult:
        accuracy = payload.accuracy
        score = accuracy.score if accuracy else None
        relevance = accuracy.relevance if accuracy else None
        # A zero score counts as missing and falls back to relevance.
        effective = score if score else relevance
        return GeocodeResult(
            latitude=payload.latitude,
            longitude=payload.longitude,
            formatted_address=payload.formattedAddress or payload.placeName,
            place_type=payload.placeType,
            accuracy_score=min(1.0, max(0.0, effective or 0.0)),
            accuracy_level=resolve_accuracy_level(effective, accuracy.level if accuracy else None),
            confidence=accuracy.confidence if accuracy else None,
            relevance=relevance,
            provider=payload.provider,
            from_cache=cache_status == "hit",
        )

    def _to_response(self, payload: GeocodeResponsePayload, query: str) -> GeocodeResponse:
        meta = payload.meta
        result = self._to_result(payload.result, meta.cacheStatus)

        reliability = (
            int(round(meta.reliability))
            if meta.reliability is not None
            else min(100, int(round(result.accuracy_score * 100)))
        )
        warnings = [
            GeocodeWarning(type=warning.type, message=warning.message, details=warning.details)
            for warning in meta.warnings or []
        ]
        if reliability < self.settings.reliability_warning_threshold and not any(
            warning.type == LOW_RELIABILITY for warning in warnings
        ):
            warnings.append(
                GeocodeWarning(
                    type=LOW_RELIABILITY,
                    message="Geocoding result may be inaccurate, please verify the address",
                    details={"reliability": reliability},
                )
            )
        bounds = self.settings.service_area_bounds
        if bounds and not within_bounds(result.latitude, result.longitude, bounds):
            warnings.append(
                GeocodeWarning(
                    type=OUTSIDE_SERVICE_AREA,
                    message="Geocoding result lies outside the service area",
                    details={"latitude": result.latitude, "longitude": result.longitude},
                )
            )

        return GeocodeResponse(
            success=payload.success,
            result=result,
            meta=GeocodeMeta(
                query=meta.query or query,
                reliability=reliability,
                warnings=warnings,
                timestamp=meta.timestamp,
                provider=meta.provider,
                cache_status=meta.cacheStatus,
            ),
            all_results=(
                [self._to_result(item, meta.cacheStatus) for item in payload.allResults]
                if payload.allResults
                else None
            ),
        )

    async def geocode_address(self, address: str, options: GeocodeOptions | None = None) -> GeocodeResponse:
        """Resolve a free-text address.

        Low reliability is reported through ``meta.warnings``; GeocodeError is
        raised only when no result could be obtained.
        """
        options = options or GeocodeOptions()
        query = normalize_address(address) if options.normalize else (address or "").strip()
        if not query:
            raise GeocodeError("An address is required for geocoding.", query=address)

        logger.debug(f"Geocoding address: {query!r}")
        try:
            async with self._open() as client:
                response = await client.post(GEOCODE_PATH, json={"address": query, "options": options.to_payload()})
                response.raise_for_status()
                payload = GeocodeResponsePayload.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            raise _error_from_response(exc.response, address, "Geocoding failed") from exc
        except httpx.HTTPError as exc:
            raise GeocodeError(f"Geocoding request failed: {exc}", query=address) from exc
        except ValueError as exc:
            raise GeocodeError(f"Unexpected geocoding response: {exc}", query=address) from exc

        result = self._to_response(payload, address)
        for warning in result.meta.warnings:
            logger.warning(f"Geocoding warning for {query!r} ({warning.type}): {warning.message}")
        return result

    async def reverse_geocode(
        self,
        longitude: float,
        latitude: float,
        *,
        language: str = "en",
        types: str = "address",
        limit: int = 1,
    ) -> ReverseGeocodeResult:
        query = f"{longitude},{latitude}"
        body = {
            "longitude": longitude,
            "latitude": latitude,
            "options": {"language": language, "types": types, "limit": limit},
        }
        try:
            async with self._open() as client:
                response = await client.post(REVERSE_GEOCODE_PATH, json=body)
                response.raise_for_status()
                payload = ReverseGeocodeResponsePayload.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            raise _error_from_response(exc.response, query, "Reverse geocoding failed") from exc
        except httpx.HTTPError as exc:
            raise GeocodeError(f"Reverse geocoding request failed: {exc}", query=query) from exc
        except ValueError as exc:
            raise GeocodeError(f"Unexpected reverse geocoding response: {exc}", query=query) from exc

        result = payload.result
        return ReverseGeocodeResult(
            address=result.address,
            place_name=result.placeName,
            place_type=result.placeType or "unknown",
            context=list(result.context or []),
            provider=result.provider,
        )

    async def _geocode_item(self, address: str, options: GeocodeOptions | None) -> BulkGeocodeItem:
        try:
            result = await self.geocode_address(address, options)
        except GeocodeError as exc:
            logger.warning(f"Geocoding failed for {address!r} in batch: {exc.message}")
            return BulkGeocodeItem(address=address, success=False, error=exc)
        return BulkGeocodeItem(address=address, success=True, result=result)

    def _bulk_item(self, raw: Any, fallback_address: str) -> BulkGeocodeItem:
        item = BulkGeocodeItemPayload.model_validate(raw)
        address = item.address or fallback_address
        if item.success and item.result is not None:
            payload = GeocodeResponsePayload(
                success=True,
                result=item.result,
                meta=item.meta or GeocodeMetaPayload(query=address),
            )
            return BulkGeocodeItem(address=address, success=True, result=self._to_response(payload, address))

        message = item.message or "Geocoding failed"
        if isinstance(item.error, str):
            message = item.error
        elif isinstance(item.error, dict):
            message = item.error.get("message") or message
        return BulkGeocodeItem(address=address, success=False, error=GeocodeError(message, query=address))

    async def bulk_geocode(
        self, addresses: Iterable[str], options: GeocodeOptions | None = None
    ) -> list[BulkGeocodeItem]:
        """Geocode many addresses; one failing address never fails the batch.

        Small batches go out as concurrent single requests, larger ones as a
        single call to the bulk endpoint. Results follow input order.
        """
        addresses = list(addresses)
        if len(addresses) <= self.settings.bulk_geocode_parallel_threshold:
            logger.debug(f"Geocoding {len(addresses)} addresses with parallel single requests")
            return list(await asyncio.gather(*(self._geocode_item(address, options) for address in addresses)))

        logger.debug(f"Geocoding {len(addresses)} addresses through the bulk endpoint")
        options = options or GeocodeOptions()
        try:
            async with self._open() as client:
                response = await client.post(
                    BULK_GEOCODE_PATH, json={"addresses": addresses, "options": options.to_payload()}
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise _error_from_response(exc.response, "", "Bulk geocoding failed") from exc
        except httpx.HTTPError as exc:
            raise GeocodeError(f"Bulk geocoding request failed: {exc}") from exc
        except ValueError as exc:
            raise GeocodeError(f"Unexpected bulk geocoding response: {exc}") from exc

        items = data.get("results") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise GeocodeError("Unexpected bulk geocoding response: expected a list of results.")
        try:
            return [
                self._bulk_item(raw, addresses[index] if index < len(addresses) else "")
                for index, raw in enumerate(items)
            ]
        except ValueError as exc:
            raise GeocodeError(f"Unexpected bulk geocoding response: {exc}") from exc
