"""Daily route endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Path, status

from ...persistence import FieldRepository
from ...schemas.routing import DailyRouteModel, OptimizeRouteRequest, RouteResponse, TeamRoutesResponse
from ...services.routing.service import (
    get_route_for_date,
    get_team_routes,
    mark_waypoint_visited,
    optimize_route,
    parse_route_date,
)
from ..deps import CallerContext, CallerDep, RepositoryDep

router = APIRouter(prefix="/routes", tags=["routes"])


def _route_response(route) -> RouteResponse:
    return RouteResponse(data=DailyRouteModel.from_domain(route) if route else None)


@router.post("", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def optimize(
    payload: OptimizeRouteRequest,
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RouteResponse:
    """Optimise (or re-optimise) the caller's route for the requested day."""
    result = optimize_route(
        repository,
        caller.company_id,
        caller.employee_id,
        parse_route_date(payload.date),
        payload.start_lat,
        payload.start_lng,
        payload.store_ids,
    )
    return _route_response(result.route)


@router.get("/today", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def route_today(
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RouteResponse:
    route = get_route_for_date(repository, caller.company_id, caller.employee_id, date.today())
    return _route_response(route)


@router.get("/team/today", response_model=TeamRoutesResponse, status_code=status.HTTP_200_OK)
def team_routes_today(
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> TeamRoutesResponse:
    """Manager view of every rep's route for today."""
    routes = get_team_routes(repository, caller.company_id, caller.employee_id, date.today())
    return TeamRoutesResponse(data=[DailyRouteModel.from_domain(route) for route in routes])


@router.get("/{route_date}", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def route_for_date(
    route_date: str = Path(..., description="Route date as YYYY-MM-DD"),
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RouteResponse:
    route = get_route_for_date(repository, caller.company_id, caller.employee_id, parse_route_date(route_date))
    return _route_response(route)


@router.patch("/{route_id}/waypoints/{sequence}", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def visit_waypoint(
    route_id: str,
    sequence: int,
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RouteResponse:
    """Mark the waypoint at ``sequence`` as visited."""
    result = mark_waypoint_visited(
        repository,
        caller.company_id,
        route_id,
        sequence,
        employee_id=caller.employee_id,
    )
    return _route_response(result.route)
