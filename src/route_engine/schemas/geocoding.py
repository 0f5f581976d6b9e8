"""Geocoding request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import BulkGeocodeItem, GeocodeResponse, GeocodeResult, ReverseGeocodeResult
from ..services.errors import GeocodeError
from ..services.geocoding.client import GeocodeOptions


class GeocodeOptionsModel(BaseModel):
    language: str = "en"
    autocomplete: Optional[bool] = None
    fuzzy_match: bool = True
    country: str = ""
    types: str = "address,place"
    limit: int = Field(default=1, ge=1, le=10)
    current_latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    current_longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    normalize: bool = Field(default=False, description="Clean up the address text before geocoding.")

    def to_options(self) -> GeocodeOptions:
        current = None
        if self.current_latitude is not None and self.current_longitude is not None:
            current = (self.current_latitude, self.current_longitude)
        return GeocodeOptions(
            language=self.language,
            autocomplete=self.autocomplete,
            fuzzy_match=self.fuzzy_match,
            country=self.country,
            types=self.types,
            limit=self.limit,
            current_location=current,
            normalize=self.normalize,
        )


class GeocodeRequest(BaseModel):
    address: str = Field(..., min_length=1)
    options: GeocodeOptionsModel = Field(default_factory=GeocodeOptionsModel)


class ReverseGeocodeRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    language: str = "en"
    types: str = "address"
    limit: int = Field(default=1, ge=1, le=10)


class BulkGeocodeRequest(BaseModel):
    addresses: List[str] = Field(..., min_length=1, max_length=100)
    options: GeocodeOptionsModel = Field(default_factory=GeocodeOptionsModel)


class GeocodeWarningModel(BaseModel):
    type: str
    message: str
    details: Optional[dict] = None


class GeocodeResultModel(BaseModel):
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    place_type: Optional[str] = None
    accuracy_score: float
    accuracy_level: str
    confidence: Optional[float] = None
    relevance: Optional[float] = None
    provider: Optional[str] = None
    from_cache: bool = False

    @classmethod
    def from_domain(cls, result: GeocodeResult) -> "GeocodeResultModel":
        return cls(
            latitude=result.latitude,
            longitude=result.longitude,
            formatted_address=result.formatted_address,
            place_type=result.place_type,
            accuracy_score=result.accuracy_score,
            accuracy_level=result.accuracy_level.value,
            confidence=result.confidence,
            relevance=result.relevance,
            provider=result.provider,
            from_cache=result.from_cache,
        )


class GeocodeMetaModel(BaseModel):
    query: str
    reliability: Optional[int] = None
    warnings: List[GeocodeWarningModel] = Field(default_factory=list)
    timestamp: Optional[str] = None
    provider: Optional[str] = None
    cache_status: Optional[str] = None


class GeocodeResponseModel(BaseModel):
    success: bool
    result: GeocodeResultModel
    meta: GeocodeMetaModel
    all_results: Optional[List[GeocodeResultModel]] = None

    @classmethod
    def from_domain(cls, response: GeocodeResponse) -> "GeocodeResponseModel":
        meta = response.meta
        return cls(
            success=response.success,
            result=GeocodeResultModel.from_domain(response.result),
            meta=GeocodeMetaModel(
                query=meta.query,
                reliability=meta.reliability,
                warnings=[
                    GeocodeWarningModel(type=w.type, message=w.message, details=w.details)
                    for w in meta.warnings
                ],
                timestamp=meta.timestamp,
                provider=meta.provider,
                cache_status=meta.cache_status,
            ),
            all_results=(
                [GeocodeResultModel.from_domain(item) for item in response.all_results]
                if response.all_results
                else None
            ),
        )


class ReverseGeocodeResponseModel(BaseModel):
    address: str
    place_name: Optional[str] = None
    place_type: str
    context: List[dict] = Field(default_factory=list)
    provider: Optional[str] = None

    @classmethod
    def from_domain(cls, result: ReverseGeocodeResult) -> "ReverseGeocodeResponseModel":
        return cls(
            address=result.address,
            place_name=result.place_name,
            place_type=result.place_type,
            context=result.context,
            provider=result.provider,
        )


class BulkGeocodeItemModel(BaseModel):
    address: str
    success: bool
    result: Optional[GeocodeResponseModel] = None
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, item: BulkGeocodeItem) -> "BulkGeocodeItemModel":
        error = None
        if item.error is not None:
            error = item.error.message if isinstance(item.error, GeocodeError) else str(item.error)
        return cls(
            address=item.address,
            success=item.success,
            result=GeocodeResponseModel.from_domain(item.result) if item.result else None,
            error=error,
        )


class BulkGeocodeResponse(BaseModel):
    total: int
    succeeded: int
    failed: int
    results: List[BulkGeocodeItemModel]
