import pytest
from pydantic import ValidationError

from route_engine.config import Settings
from route_engine.models.domain import ProviderConfig
from route_engine.services.routing.segments import OverlapParams


def test_defaults():
    settings = Settings()
    assert settings.primary_timeout_seconds == 8.0
    assert settings.osrm_timeout_seconds == 5.0
    assert settings.bulk_geocode_parallel_threshold == 5
    assert settings.service_area_bounds == (0.85, 99.65, 7.35, 119.27)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ROUTE_ENGINE_OSRM_PROFILE", "walking")
    monkeypatch.setenv("ROUTE_ENGINE_USE_MOCK_ON_FAILURE", "false")
    monkeypatch.setenv("ROUTE_ENGINE_SERVICE_AREA_BOUNDS", "[1, 2, 3, 4]")
    monkeypatch.setenv("ROUTE_ENGINE_FRONTEND_ALLOWED_ORIGINS", '["http://a.test", "http://b.test"]')

    settings = Settings()
    assert settings.osrm_profile == "walking"
    assert settings.use_mock_on_failure is False
    assert settings.service_area_bounds == (1.0, 2.0, 3.0, 4.0)
    assert settings.frontend_allowed_origins == ("http://a.test", "http://b.test")


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        Settings(osrm_profile="flying")
    with pytest.raises(ValidationError):
        Settings(mock_return_probability=1.5)


def test_provider_config_from_settings():
    settings = Settings(primary_enabled=False, mapbox_access_token="pk.static", osrm_base_url="http://osrm.test")
    config = ProviderConfig.from_settings(settings)

    assert config.primary_enabled is False
    assert config.primary_token == "pk.static"
    assert config.osrm_base_url == "http://osrm.test"
    assert config.osrm_profile == "driving"


def test_overlap_params_from_settings(monkeypatch):
    from route_engine.services.routing import segments

    monkeypatch.setattr(segments.settings, "overlap_threshold_degrees", 0.001)
    assert OverlapParams.from_settings().threshold_degrees == 0.001
