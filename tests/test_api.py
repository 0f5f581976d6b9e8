import random

import pytest
from fastapi.testclient import TestClient

from route_engine.api.routes import geocoding as geocoding_routes
from route_engine.api.routes import health as health_routes
from route_engine.api.routes import map_config as map_config_routes
from route_engine.api.routes import routes as routing_routes
from route_engine.main import create_app
from route_engine.models.domain import (
    AccuracyLevel,
    GeocodeMeta,
    GeocodeResponse,
    GeocodeResult,
    ProviderConfig,
)
from route_engine.services.errors import GeocodeError
from route_engine.services.routing.chain import MOCK_ROUTE_WARNING, RouteProviderChain

PLAN_PAYLOAD = {
    "waypoints": [
        {"id": "A", "latitude": 3.15, "longitude": 101.70, "service_time_minutes": 15},
        {"id": "B", "latitude": 3.10, "longitude": 101.65},
    ],
    "optimize": False,
}


def _config(**overrides) -> ProviderConfig:
    values = dict(
        primary_enabled=False,
        osrm_enabled=False,
        osrm_base_url="http://osrm.test",
        use_mock_on_failure=True,
        log_performance=False,
    )
    values.update(overrides)
    return ProviderConfig(**values)


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def _use_chain(monkeypatch, config: ProviderConfig) -> None:
    monkeypatch.setattr(
        routing_routes,
        "get_route_chain",
        lambda: RouteProviderChain(config, rng=random.Random(11)),
    )


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/api/health").json() == {"status": "ok"}


def test_osrm_health(client, monkeypatch):
    async def healthy(base_url=None, profile=None):
        return True

    monkeypatch.setattr(health_routes, "osrm_health_check", healthy)
    monkeypatch.setattr(health_routes, "get_provider_config", lambda: _config(osrm_enabled=True))
    response = client.get("/api/health/osrm")
    assert response.json() == {"service": "osrm", "enabled": True, "healthy": True}


def test_plan_route_falls_back_to_mock(client, monkeypatch):
    _use_chain(monkeypatch, _config())
    response = client.post("/api/routes/plan", json=PLAN_PAYLOAD)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["provider"] == "mock"
    assert body["warning"] == MOCK_ROUTE_WARNING
    route = body["route"]
    assert len(route["segments"]) == 1
    assert route["service_time_total_minutes"] == 15
    assert route["total_time_minutes"] == route["duration_minutes"] + 15
    assert route["segments"][0]["start_waypoint_id"] == "A"


def test_plan_route_needs_two_stops(client, monkeypatch):
    _use_chain(monkeypatch, _config())
    payload = {"waypoints": [PLAN_PAYLOAD["waypoints"][0]]}
    response = client.post("/api/routes/plan", json=payload)
    assert response.status_code == 400


def test_plan_route_rejects_negative_service_time(client, monkeypatch):
    _use_chain(monkeypatch, _config())
    payload = {
        "waypoints": [
            {"id": "A", "latitude": 3.15, "longitude": 101.70, "service_time_minutes": -5},
            {"id": "B", "latitude": 3.10, "longitude": 101.65},
        ]
    }
    response = client.post("/api/routes/plan", json=payload)
    assert response.status_code == 422


def test_plan_route_terminal_failure(client, monkeypatch):
    _use_chain(monkeypatch, _config(use_mock_on_failure=False))
    response = client.post("/api/routes/plan", json=PLAN_PAYLOAD)

    assert response.status_code == 502
    assert response.json()["detail"]["provider"] == "none"


class FakeGeocodeClient:
    async def geocode_address(self, address, options=None):
        if address == "Nowhere":
            raise GeocodeError("No results", query=address, status_code=404, details=["Add a city"])
        if address == "Broken":
            raise GeocodeError("Geocoding request failed", query=address)
        return GeocodeResponse(
            success=True,
            result=GeocodeResult(
                latitude=3.15,
                longitude=101.70,
                formatted_address="Jalan Ampang, Kuala Lumpur",
                place_type="address",
                accuracy_score=0.92,
                accuracy_level=AccuracyLevel.VERY_HIGH,
            ),
            meta=GeocodeMeta(query=address, reliability=92),
        )


def test_geocode_endpoint(client, monkeypatch):
    monkeypatch.setattr(geocoding_routes, "get_geocode_client", FakeGeocodeClient)

    response = client.post("/api/geocode", json={"address": "Jalan Ampang"})
    assert response.status_code == 200
    body = response.json()
    assert body["result"]["accuracy_level"] == "very_high"
    assert body["meta"]["reliability"] == 92


def test_geocode_errors_map_to_status(client, monkeypatch):
    monkeypatch.setattr(geocoding_routes, "get_geocode_client", FakeGeocodeClient)

    not_found = client.post("/api/geocode", json={"address": "Nowhere"})
    assert not_found.status_code == 404
    assert not_found.json()["detail"]["suggestions"] == ["Add a city"]

    broken = client.post("/api/geocode", json={"address": "Broken"})
    assert broken.status_code == 502


def test_map_config_hides_token(client, monkeypatch):
    monkeypatch.setattr(map_config_routes.resolver, "config", _config(primary_enabled=True, primary_token="secret"))

    response = client.get("/api/map-config")
    assert response.status_code == 200
    assert response.json()["primary_enabled"] is True
    assert response.json()["primary_token_configured"] is True
    assert "secret" not in response.text


def test_plan_route_rejects_negative_positional_service_time(client, monkeypatch):
    _use_chain(monkeypatch, _config())
    payload = {**PLAN_PAYLOAD, "service_times": [-30, 10]}
    response = client.post("/api/routes/plan", json=payload)
    assert response.status_code == 422
