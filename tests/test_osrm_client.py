import asyncio

import httpx
import pytest

from route_engine.models.domain import RouteProvider, Waypoint
from route_engine.schemas.providers import OSRMLeg, OSRMStep
from route_engine.services.routing.osrm_client import OSRMClient, leg_geometry
from route_engine.services.routing.polyline import encode_polyline
from route_engine.services.routing.stops import build_request

A = (3.15, 101.70)
MID = (3.125, 101.68)
B = (3.10, 101.65)


def _osrm_payload() -> dict:
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": encode_polyline([A, MID, B]),
                "distance": 8040.0,
                "duration": 610.0,
                "legs": [
                    {
                        "distance": 8040.0,
                        "duration": 610.0,
                        "steps": [
                            {
                                "distance": 4000.0,
                                "duration": 300.0,
                                "geometry": encode_polyline([A, MID]),
                                "maneuver": {"type": "depart"},
                            },
                            {
                                "distance": 4040.0,
                                "duration": 310.0,
                                "geometry": encode_polyline([MID, B]),
                                "maneuver": {"type": "arrive"},
                            },
                        ],
                    }
                ],
            }
        ],
    }


def _request():
    return build_request(
        [Waypoint(id="A", latitude=A[0], longitude=A[1]), Waypoint(id="B", latitude=B[0], longitude=B[1])]
    )


def _run(handler, request=None, **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            osrm = OSRMClient(base_url="http://osrm.test", profile="driving", client=client, **kwargs)
            return await osrm.plan(request or _request())

    return asyncio.run(go())


def test_plan_normalizes_osrm_route():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_osrm_payload())

    route = _run(handler)

    assert seen[0].url.path == "/route/v1/driving/101.7,3.15;101.65,3.1"
    assert seen[0].url.params["overview"] == "full"
    assert seen[0].url.params["steps"] == "true"
    assert route.provider is RouteProvider.OSRM
    assert route.distance_km == 8.0
    assert route.duration_minutes == 10
    assert route.coordinates == [pytest.approx(A), pytest.approx(MID), pytest.approx(B)]
    assert len(route.segments) == 1
    assert route.segments[0].distance_km == 8.0
    assert len(route.segments[0].coordinates) == 3
    assert [step.instruction for step in route.steps] == ["depart", "arrive"]


def test_start_location_is_prepended():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_osrm_payload())

    request = build_request(
        [Waypoint(id="A", latitude=A[0], longitude=A[1])], start_location=B
    )
    route = _run(handler, request)

    assert seen[0].url.path == "/route/v1/driving/101.65,3.1;101.7,3.15"
    assert route.waypoints[0].is_customer_location


def test_error_code_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route", "routes": []})

    with pytest.raises(ValueError, match="Impossible route"):
        _run(handler)


def test_server_errors_are_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503, json={"message": "busy"})
        return httpx.Response(200, json=_osrm_payload())

    route = _run(handler, max_retries=1, backoff_seconds=0)
    assert len(calls) == 2
    assert route.provider is RouteProvider.OSRM


def test_client_errors_are_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(400, json={"code": "InvalidQuery"})

    with pytest.raises(httpx.HTTPStatusError):
        _run(handler, max_retries=3, backoff_seconds=0)
    assert len(calls) == 1


def test_network_errors_become_connection_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ConnectionError):
        _run(handler, max_retries=1, backoff_seconds=0)


def test_leg_geometry_prefers_leg_polyline():
    leg = OSRMLeg(geometry=encode_polyline([A, B]))
    assert leg_geometry(leg) == [pytest.approx(A), pytest.approx(B)]


def test_leg_geometry_stitches_steps():
    leg = OSRMLeg(
        steps=[
            OSRMStep(geometry=encode_polyline([A, MID])),
            OSRMStep(geometry=None),
            OSRMStep(geometry=encode_polyline([MID, B])),
        ]
    )
    assert len(leg_geometry(leg)) == 3
