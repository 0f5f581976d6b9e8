"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_ENGINE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Appointment Route Engine API"
    api_prefix: str = "/api"
    api_base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the map backend serving geocoding, routing and map config.",
    )
    map_config_path: str = Field(default="/map/config", description="Path of the remote map config endpoint.")

    # Primary provider
    primary_enabled: bool = True
    mapbox_access_token: Optional[str] = Field(
        default=None,
        description="Static access token; replaced by the remote map config when available.",
    )
    primary_timeout_seconds: float = Field(default=8.0, gt=0.0)

    # OSRM backup
    osrm_enabled: bool = True
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "walking", "cycling"] = Field(
        default="driving",
        description="OSRM profile to use when computing routes.",
    )
    osrm_timeout_seconds: float = Field(default=5.0, gt=0.0)
    osrm_max_retries: int = Field(default=1, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # Local fallback
    use_mock_on_failure: bool = True
    mock_interpolation_steps: int = Field(default=3, ge=0)
    mock_minutes_per_km: float = Field(default=2.0, gt=0.0)
    mock_return_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    log_performance: bool = True

    # Geocoding
    geocode_timeout_seconds: float = Field(default=10.0, gt=0.0)
    config_timeout_seconds: float = Field(default=5.0, gt=0.0)
    bulk_geocode_parallel_threshold: int = Field(
        default=5,
        ge=1,
        description="Batches up to this size are geocoded one request per address.",
    )
    reliability_warning_threshold: int = Field(default=70, ge=0, le=100)
    service_area_bounds: Optional[tuple[float, float, float, float]] = Field(
        default=(0.85, 99.65, 7.35, 119.27),
        description="min_lat, min_lng, max_lat, max_lng of the serviced area. Unset to disable the check.",
    )

    # Overlap detection
    overlap_threshold_degrees: float = Field(default=1e-4, gt=0.0)
    overlap_sample_count: int = Field(default=20, ge=1)
    overlap_min_points: int = Field(default=5, ge=1)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("service_area_bounds", mode="before")
    @classmethod
    def _parse_bounds_from_env(cls, value: Any) -> Optional[tuple[float, float, float, float]]:
        """Parse bounds from environment variable (comma-separated or JSON array)."""
        if value is None or isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(float(item) for item in value)
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(float(item) for item in parsed)
            except (json.JSONDecodeError, TypeError, ValueError):
                pass
            return tuple(float(item.strip()) for item in value.split(",") if item.strip())
        return value


settings = Settings()
