"""Domain models for route planning and geocoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

LatLng = tuple[float, float]


class RouteProvider(str, Enum):
    PRIMARY = "primary"
    OSRM = "osrm"
    MOCK = "mock"


class AccuracyLevel(str, Enum):
    """Coarse confidence buckets, ordered from most to least precise."""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int:
        return _ACCURACY_RANK[self]


_ACCURACY_RANK = {
    AccuracyLevel.UNKNOWN: 0,
    AccuracyLevel.VERY_LOW: 1,
    AccuracyLevel.LOW: 2,
    AccuracyLevel.MEDIUM: 3,
    AccuracyLevel.HIGH: 4,
    AccuracyLevel.VERY_HIGH: 5,
}


@dataclass(slots=True)
class Waypoint:
    """A stop the route must visit."""

    id: str
    latitude: float
    longitude: float
    is_customer_location: bool = False
    service_time_minutes: int = 0
    index: Optional[int] = None


@dataclass(slots=True)
class RouteStep:
    instruction: str
    distance_km: float
    duration_minutes: int


@dataclass(slots=True)
class RouteLeg:
    """Provider-reported travel between two consecutive waypoints."""

    distance_km: float
    duration_minutes: int
    coordinates: list[LatLng] = field(default_factory=list)


@dataclass(slots=True)
class RouteSegment:
    index: int
    coordinates: list[LatLng]
    distance_km: float
    duration_minutes: int
    start_waypoint: Waypoint
    end_waypoint: Waypoint
    is_return_segment: bool
    suggested_color_index: int


@dataclass(slots=True)
class RouteRequest:
    """Normalized input of a single planning call."""

    waypoints: list[Waypoint]
    optimize: bool = True
    start_location: Optional[LatLng] = None
    service_times: list[int] = field(default_factory=list)


@dataclass(slots=True)
class RouteResult:
    waypoints: list[Waypoint]
    coordinates: list[LatLng]
    distance_km: float
    duration_minutes: int
    segments: list[RouteSegment]
    service_time_total_minutes: int
    provider: RouteProvider
    steps: list[RouteStep] = field(default_factory=list)
    request: Optional[RouteRequest] = None

    @property
    def total_time_minutes(self) -> int:
        return self.duration_minutes + self.service_time_total_minutes


@dataclass(slots=True)
class RoutePlan:
    """Outcome of a provider chain run, as handed to the map view."""

    route: RouteResult
    provider: RouteProvider
    warning: Optional[str] = None
    success: bool = True


@dataclass(slots=True)
class GeocodeWarning:
    type: str
    message: str
    details: Optional[dict] = None


@dataclass(slots=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: Optional[str]
    place_type: Optional[str]
    accuracy_score: float
    accuracy_level: AccuracyLevel
    confidence: Optional[float] = None
    relevance: Optional[float] = None
    provider: Optional[str] = None
    from_cache: bool = False


@dataclass(slots=True)
class GeocodeMeta:
    query: str
    reliability: Optional[int] = None
    warnings: list[GeocodeWarning] = field(default_factory=list)
    timestamp: Optional[str] = None
    provider: Optional[str] = None
    cache_status: Optional[str] = None


@dataclass(slots=True)
class GeocodeResponse:
    success: bool
    result: GeocodeResult
    meta: GeocodeMeta
    all_results: Optional[list[GeocodeResult]] = None


@dataclass(slots=True)
class ReverseGeocodeResult:
    address: str
    place_name: Optional[str]
    place_type: str
    context: list[dict] = field(default_factory=list)
    provider: Optional[str] = None


@dataclass(slots=True)
class BulkGeocodeItem:
    address: str
    success: bool
    result: Optional[GeocodeResponse] = None
    error: Optional[Exception] = None


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Process-wide provider switches; replaced as a whole, never mutated."""

    primary_enabled: bool
    osrm_enabled: bool
    osrm_base_url: str
    use_mock_on_failure: bool
    log_performance: bool
    primary_token: Optional[str] = None
    osrm_profile: str = "driving"

    @classmethod
    def from_settings(cls, settings) -> "ProviderConfig":
        return cls(
            primary_enabled=settings.primary_enabled,
            primary_token=settings.mapbox_access_token,
            osrm_enabled=settings.osrm_enabled,
            osrm_base_url=settings.osrm_base_url,
            osrm_profile=settings.osrm_profile,
            use_mock_on_failure=settings.use_mock_on_failure,
            log_performance=settings.log_performance,
        )
