"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import DailyRoute


class OptimizeRouteRequest(BaseModel):
    # Optional here so missing coordinates surface as the service's 400 message.
    start_lat: Optional[float] = Field(default=None, description="Rep's starting latitude (WGS84).")
    start_lng: Optional[float] = Field(default=None, description="Rep's starting longitude (WGS84).")
    date: Optional[str] = Field(default=None, description="Route date as YYYY-MM-DD; defaults to today.")
    store_ids: Optional[List[str]] = Field(
        default=None,
        description="Explicit stores to visit. When omitted, stores come from the revisit schedule plus nearby A/B stores.",
    )


class WaypointModel(BaseModel):
    store_id: str
    store_name: str
    tier: str
    latitude: float
    longitude: float
    priority: str
    estimated_arrival: str
    estimated_duration_minutes: int
    sequence: int
    visited: bool
    distance_from_prev_km: float
    store_name_zh: Optional[str] = None


class DailyRouteModel(BaseModel):
    id: Optional[str]
    company_id: str
    employee_id: str
    date: str
    waypoints: List[WaypointModel]
    total_distance_km: float
    estimated_duration_minutes: int
    optimized: bool
    version: int
    employee_name: Optional[str] = None

    @classmethod
    def from_domain(cls, route: DailyRoute) -> "DailyRouteModel":
        return cls(
            id=route.id,
            company_id=route.company_id,
            employee_id=route.employee_id,
            date=route.date.isoformat(),
            waypoints=[WaypointModel(**waypoint.to_dict()) for waypoint in route.waypoints],
            total_distance_km=route.total_distance_km,
            estimated_duration_minutes=route.estimated_duration_minutes,
            optimized=route.optimized,
            version=route.version,
            employee_name=route.employee_name,
        )


class RouteResponse(BaseModel):
    success: bool = True
    data: Optional[DailyRouteModel] = None


class TeamRoutesResponse(BaseModel):
    success: bool = True
    data: List[DailyRouteModel]
