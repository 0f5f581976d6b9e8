"""Route planning request/response schemas."""

from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from ..models.domain import RoutePlan, RouteResult, RouteSegment, Waypoint


class LocationModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class WaypointModel(LocationModel):
    id: str
    service_time_minutes: int = Field(default=0, ge=0)


class RoutePlanRequest(BaseModel):
    waypoints: List[WaypointModel] = Field(..., min_length=1)
    optimize: bool = True
    start_location: Optional[LocationModel] = Field(
        default=None,
        description="Customer or depot location the route starts from.",
    )
    service_times: List[Annotated[int, Field(ge=0)]] = Field(
        default_factory=list,
        description="Per-stop service minutes, matched to waypoints by position.",
    )

    def to_domain(self) -> tuple[list[Waypoint], Optional[tuple[float, float]]]:
        waypoints = [
            Waypoint(
                id=wp.id,
                latitude=wp.latitude,
                longitude=wp.longitude,
                service_time_minutes=wp.service_time_minutes,
            )
            for wp in self.waypoints
        ]
        start = (self.start_location.latitude, self.start_location.longitude) if self.start_location else None
        return waypoints, start


class RouteStopModel(BaseModel):
    id: str
    latitude: float
    longitude: float
    index: int
    service_time_minutes: int
    is_customer_location: bool = False

    @classmethod
    def from_domain(cls, waypoint: Waypoint) -> "RouteStopModel":
        return cls(
            id=waypoint.id,
            latitude=waypoint.latitude,
            longitude=waypoint.longitude,
            index=waypoint.index or 0,
            service_time_minutes=waypoint.service_time_minutes,
            is_customer_location=waypoint.is_customer_location,
        )


class RouteStepModel(BaseModel):
    instruction: str
    distance_km: float
    duration_minutes: int


class RouteSegmentModel(BaseModel):
    index: int
    coordinates: List[List[float]]
    distance_km: float
    duration_minutes: int
    start_waypoint_id: str
    end_waypoint_id: str
    is_return_segment: bool
    suggested_color_index: int

    @classmethod
    def from_domain(cls, segment: RouteSegment) -> "RouteSegmentModel":
        return cls(
            index=segment.index,
            coordinates=[[lat, lng] for lat, lng in segment.coordinates],
            distance_km=segment.distance_km,
            duration_minutes=segment.duration_minutes,
            start_waypoint_id=segment.start_waypoint.id,
            end_waypoint_id=segment.end_waypoint.id,
            is_return_segment=segment.is_return_segment,
            suggested_color_index=segment.suggested_color_index,
        )


class RouteModel(BaseModel):
    provider: str
    waypoints: List[RouteStopModel]
    coordinates: List[List[float]]
    distance_km: float
    duration_minutes: int
    service_time_total_minutes: int
    total_time_minutes: int
    segments: List[RouteSegmentModel]
    steps: List[RouteStepModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, route: RouteResult) -> "RouteModel":
        return cls(
            provider=route.provider.value,
            waypoints=[RouteStopModel.from_domain(wp) for wp in route.waypoints],
            coordinates=[[lat, lng] for lat, lng in route.coordinates],
            distance_km=route.distance_km,
            duration_minutes=route.duration_minutes,
            service_time_total_minutes=route.service_time_total_minutes,
            total_time_minutes=route.total_time_minutes,
            segments=[RouteSegmentModel.from_domain(segment) for segment in route.segments],
            steps=[
                RouteStepModel(
                    instruction=step.instruction,
                    distance_km=step.distance_km,
                    duration_minutes=step.duration_minutes,
                )
                for step in route.steps
            ],
        )


class RoutePlanResponse(BaseModel):
    success: bool = True
    provider: str
    warning: Optional[str] = None
    route: RouteModel

    @classmethod
    def from_domain(cls, plan: RoutePlan) -> "RoutePlanResponse":
        return cls(
            success=plan.success,
            provider=plan.provider.value,
            warning=plan.warning,
            route=RouteModel.from_domain(plan.route),
        )
