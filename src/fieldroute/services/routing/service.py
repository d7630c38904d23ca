"""Routing orchestration service."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ...config import settings
from ...errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from ...models.domain import DailyRoute, Store, Waypoint
from ...persistence.repository import FieldRepository
from ..access import is_manager, require_employee
from ..geospatial import haversine_km, is_valid_coordinate, validate_coordinate
from ..scheduling.rules import resolve_store_tier
from .models import OrderedStop, RouteCandidate, RouteResult
from .sequence import order_candidates

logger = logging.getLogger(__name__)

_ROUTE_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _usable(store: Store) -> bool:
    if is_valid_coordinate(store.latitude, store.longitude):
        return True
    logger.warning(f"Store {store.id} has invalid coordinates ({store.latitude}, {store.longitude}), skipping")
    return False


def _schedule_priority(next_visit_date: date, route_date: date) -> str:
    return "overdue" if next_visit_date < route_date else "due_today"


def select_candidates(
    repository: FieldRepository,
    company_id: str,
    employee_id: str,
    route_date: date,
    start: tuple[float, float],
    store_ids: Optional[Sequence[str]] = None,
) -> list[RouteCandidate]:
    """Pick the stores to visit on ``route_date``.

    Explicit ``store_ids`` are used as given (unknown ids are skipped). Without
    them: open schedule entries for the rep due on or before the date, then up
    to ``nearby_store_limit`` tier A/B stores within ``nearby_radius_km`` of the
    start point.
    """

    if store_ids:
        stores = repository.get_stores(company_id, store_ids)
        missing = set(store_ids) - {store.id for store in stores}
        if missing:
            logger.warning(f"Ignoring {len(missing)} unknown store id(s) for company {company_id}: {sorted(missing)}")
        due = {
            entry.store_id: entry.next_visit_date
            for entry in repository.list_open_revisits(company_id, due_on_or_before=route_date)
        }
        return [
            RouteCandidate(store=store, priority=_schedule_priority(due[store.id], route_date) if store.id in due else "due_today")
            for store in stores
            if _usable(store)
        ]

    entries = repository.list_open_revisits(company_id, assigned_to=employee_id, due_on_or_before=route_date)
    earliest: dict[str, date] = {}
    for entry in entries:
        if entry.store_id not in earliest or entry.next_visit_date < earliest[entry.store_id]:
            earliest[entry.store_id] = entry.next_visit_date

    candidates = [
        RouteCandidate(store=store, priority=_schedule_priority(earliest[store.id], route_date))
        for store in repository.get_stores(company_id, list(earliest))
        if _usable(store)
    ]

    if settings.nearby_store_limit > 0:
        included = {candidate.store.id for candidate in candidates}
        nearby: list[tuple[str, float, Store]] = []
        for store in repository.list_company_stores(company_id, tiers=settings.nearby_tiers):
            if store.id in included or not is_valid_coordinate(store.latitude, store.longitude):
                continue
            distance = haversine_km(start[0], start[1], store.latitude, store.longitude)
            if distance <= settings.nearby_radius_km:
                nearby.append((resolve_store_tier(store.tier), distance, store))
        nearby.sort(key=lambda item: (item[0], item[1], item[2].id))
        candidates.extend(
            RouteCandidate(store=store, priority="high_value_nearby")
            for _, _, store in nearby[: settings.nearby_store_limit]
        )
    return candidates


def _visit_minutes(tier: str) -> int:
    return int(settings.tier_visit_minutes.get(tier, settings.default_visit_minutes))


def estimate_timings(stops: Sequence[OrderedStop], route_date: date) -> tuple[list[Waypoint], float, int]:
    """Turn ordered stops into waypoints with timestamped arrivals.

    Travel runs at ``average_speed_kmh`` from ``route_day_start``; each stop
    then adds its tier's dwell time. Returns the waypoints, total travel
    distance (km, 2 decimals) and total travel + dwell minutes.
    """

    hour, minute = (int(part) for part in settings.route_day_start.split(":"))
    day_start = datetime.combine(route_date, datetime.min.time()).replace(hour=hour, minute=minute)

    waypoints: list[Waypoint] = []
    elapsed_minutes = 0.0
    total_distance = 0.0
    for sequence, stop in enumerate(stops):
        store = stop.candidate.store
        tier = resolve_store_tier(store.tier)
        total_distance += stop.distance_from_prev_km
        elapsed_minutes += stop.distance_from_prev_km / settings.average_speed_kmh * 60.0
        arrival = day_start + timedelta(minutes=elapsed_minutes)
        dwell = _visit_minutes(tier)
        waypoints.append(
            Waypoint(
                store_id=store.id,
                store_name=store.name,
                tier=tier,
                latitude=store.latitude,
                longitude=store.longitude,
                priority=stop.candidate.priority,
                estimated_arrival=arrival.isoformat(timespec="minutes"),
                estimated_duration_minutes=dwell,
                sequence=sequence,
                distance_from_prev_km=round(stop.distance_from_prev_km, 3),
                store_name_zh=store.name_zh,
            )
        )
        elapsed_minutes += dwell
    return waypoints, round(total_distance, 2), int(round(elapsed_minutes))


def optimize_route(
    repository: FieldRepository,
    company_id: str,
    employee_id: str,
    route_date: date,
    start_lat: Optional[float],
    start_lng: Optional[float],
    store_ids: Optional[Sequence[str]] = None,
) -> RouteResult:
    """Build, time and persist the rep's route for ``route_date``.

    Re-optimising the same (employee, date) replaces the stored waypoints
    wholesale.
    """

    start = validate_coordinate(start_lat, start_lng)
    require_employee(repository, company_id, employee_id)

    candidates = select_candidates(repository, company_id, employee_id, route_date, start, store_ids)
    stops = order_candidates(
        start,
        candidates,
        epsilon_km=settings.tie_break_epsilon_km,
        refine=settings.two_opt_enabled,
        max_iterations=settings.two_opt_max_iterations,
    )
    waypoints, total_distance_km, duration_minutes = estimate_timings(stops, route_date)

    route = repository.upsert_route(
        DailyRoute(
            company_id=company_id,
            employee_id=employee_id,
            date=route_date,
            waypoints=waypoints,
            total_distance_km=total_distance_km,
            estimated_duration_minutes=duration_minutes,
            optimized=True,
        )
    )
    logger.info(
        f"Optimized route {route.id} for employee {employee_id} on {route_date.isoformat()}: "
        f"{len(waypoints)} stops, {total_distance_km} km, {duration_minutes} min"
    )
    return RouteResult(route=route)


def mark_waypoint_visited(
    repository: FieldRepository,
    company_id: str,
    route_id: str,
    sequence: int,
    *,
    employee_id: Optional[str] = None,
) -> RouteResult:
    """Set ``visited`` on one waypoint, retrying when another write got there first.

    The waypoint list is written back as a whole, guarded by the route's
    version; a stale version means re-read and re-apply.
    """

    for attempt in range(1, settings.waypoint_update_max_retries + 1):
        route = repository.get_route_by_id(company_id, route_id)
        if route is None or (employee_id is not None and route.employee_id != employee_id):
            raise NotFoundError("Route not found")

        if not any(waypoint.sequence == sequence for waypoint in route.waypoints):
            raise NotFoundError(f"Waypoint with sequence {sequence} not found")

        waypoints = [
            replace(waypoint, visited=True) if waypoint.sequence == sequence else waypoint
            for waypoint in route.waypoints
        ]
        updated = repository.update_route_waypoints(route.id, waypoints, route.version)
        if updated is not None:
            return RouteResult(route=updated)
        logger.warning(f"Route {route_id} changed during waypoint update (attempt {attempt}), retrying")

    raise ConflictError(f"Route {route_id} is being modified concurrently, please retry")


def get_route_for_date(
    repository: FieldRepository,
    company_id: str,
    employee_id: str,
    route_date: date,
) -> Optional[DailyRoute]:
    return repository.get_route(company_id, employee_id, route_date)


def get_team_routes(
    repository: FieldRepository,
    company_id: str,
    employee_id: str,
    route_date: date,
) -> list[DailyRoute]:
    """Every rep's route in the company for ``route_date``; managers only."""

    employee = require_employee(repository, company_id, employee_id)
    if not is_manager(employee):
        raise ForbiddenError("Manager access required")
    return repository.list_routes_for_date(company_id, route_date)


def parse_route_date(value: Optional[str]) -> date:
    """Parse ``YYYY-MM-DD``; ``None`` means today."""

    if value is None:
        return date.today()
    if not _ROUTE_DATE.fullmatch(value):
        raise InvalidInputError("Invalid date format. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInputError("Invalid date format. Use YYYY-MM-DD.") from exc
