"""Raw payload shapes of the upstream providers.

These models mirror the JSON each upstream sends and are only used inside the
adapters, which convert them to domain types right away.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- OSRM -----------------------------------------------------------------


class OSRMManeuver(BaseModel):
    type: str = ""
    modifier: Optional[str] = None


class OSRMStep(BaseModel):
    distance: float = 0.0
    duration: float = 0.0
    geometry: Optional[str] = None
    name: str = ""
    maneuver: Optional[OSRMManeuver] = None


class OSRMLeg(BaseModel):
    distance: float = 0.0
    duration: float = 0.0
    geometry: Optional[str] = None
    steps: List[OSRMStep] = Field(default_factory=list)


class OSRMRoute(BaseModel):
    geometry: str
    distance: float
    duration: float
    legs: List[OSRMLeg] = Field(default_factory=list)


class OSRMRouteResponse(BaseModel):
    code: str
    message: Optional[str] = None
    routes: List[OSRMRoute] = Field(default_factory=list)


# --- Primary routing API ---------------------------------------------------


class PrimaryWaypoint(BaseModel):
    id: Optional[str] = None
    latitude: float
    longitude: float


class PrimaryStep(BaseModel):
    instruction: str = ""
    distance: float = 0.0  # km
    duration: float = 0.0  # minutes


class PrimaryRoute(BaseModel):
    waypoints: List[PrimaryWaypoint] = Field(default_factory=list)
    coordinates: List[List[float]] = Field(default_factory=list)
    distance: Optional[float] = None  # km
    duration: Optional[float] = None  # minutes
    steps: List[PrimaryStep] = Field(default_factory=list)
    provider: Optional[str] = None


class PrimaryRouteEnvelope(BaseModel):
    success: bool = True
    route: Optional[PrimaryRoute] = None
    error: Optional[str] = None
    message: Optional[str] = None


# --- Geocoding --------------------------------------------------------------


class GeocodeAccuracyPayload(BaseModel):
    score: Optional[float] = None
    level: Optional[str] = None
    confidence: Optional[float] = None
    relevance: Optional[float] = None


class GeocodeResultPayload(BaseModel):
    latitude: float
    longitude: float
    formattedAddress: Optional[str] = None
    placeName: Optional[str] = None
    placeType: Optional[str] = None
    accuracy: Optional[GeocodeAccuracyPayload] = None
    provider: Optional[str] = None


class GeocodeWarningPayload(BaseModel):
    type: str = "warning"
    message: str = ""
    details: Optional[dict] = None


class GeocodeMetaPayload(BaseModel):
    query: Optional[str] = None
    reliability: Optional[float] = None
    warnings: Optional[List[GeocodeWarningPayload]] = None
    timestamp: Optional[str] = None
    provider: Optional[str] = None
    cacheStatus: Optional[str] = None


class GeocodeResponsePayload(BaseModel):
    success: bool = True
    result: GeocodeResultPayload
    meta: GeocodeMetaPayload = Field(default_factory=GeocodeMetaPayload)
    allResults: Optional[List[GeocodeResultPayload]] = None


class GeocodeErrorPayload(BaseModel):
    error: Optional[str] = None
    message: Optional[str] = None
    query: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)


class ReverseGeocodeResultPayload(BaseModel):
    address: str
    placeName: Optional[str] = None
    placeType: Optional[str] = None
    context: Optional[List[dict]] = None
    provider: Optional[str] = None


class ReverseGeocodeResponsePayload(BaseModel):
    success: bool = True
    result: ReverseGeocodeResultPayload


class BulkGeocodeItemPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address: Optional[str] = None
    success: bool = False
    result: Optional[GeocodeResultPayload] = None
    meta: Optional[GeocodeMetaPayload] = None
    error: Optional[Union[str, dict]] = None
    message: Optional[str] = None


# --- Map config --------------------------------------------------------------


class MapboxConfigPayload(BaseModel):
    accessToken: Optional[str] = None
    enabled: Optional[bool] = None


class OSRMConfigPayload(BaseModel):
    enabled: Optional[bool] = None


class MapConfigPayload(BaseModel):
    mapbox: Optional[MapboxConfigPayload] = None
    osrm: Optional[OSRMConfigPayload] = None
