"""Supabase persistence for stores, revisit schedules and daily routes.

Reads go through PostgREST table queries. The two writes that must be atomic
(retire-and-insert of revisit entries, and the route upsert that bumps the
version) run as Postgres functions via ``rpc``; see
``supabase/migrations/001_field_routes.sql``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from supabase import Client

from ..errors import InvalidInputError
from ..models.domain import (
    Company,
    DailyRoute,
    Employee,
    RevisitScheduleEntry,
    Store,
    Waypoint,
)

logger = logging.getLogger(__name__)

STORE_COLUMNS = "id, company_id, name, name_zh, latitude, longitude, tier, store_type"
REVISIT_COLUMNS = "id, store_id, company_id, next_visit_date, priority, reason, assigned_to, completed"
ROUTE_COLUMNS = (
    "id, company_id, employee_id, date, waypoints, total_distance_km, "
    "estimated_duration_minutes, optimized, version"
)


def _is_uuid(*values: Any) -> bool:
    """True when every value parses as a uuid, the type of every id column."""
    for value in values:
        try:
            uuid.UUID(str(value))
        except ValueError:
            return False
    return True


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _store_from_row(row: dict) -> Store:
    return Store(
        id=str(row["id"]),
        company_id=str(row["company_id"]),
        name=row.get("name") or "",
        name_zh=row.get("name_zh"),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        tier=row.get("tier"),
        store_type=row.get("store_type") or "other",
    )


def _revisit_from_row(row: dict) -> RevisitScheduleEntry:
    return RevisitScheduleEntry(
        id=str(row["id"]),
        store_id=str(row["store_id"]),
        company_id=str(row["company_id"]),
        next_visit_date=_parse_date(row["next_visit_date"]),
        priority=row.get("priority") or "normal",
        reason=row.get("reason") or "scheduled",
        assigned_to=str(row["assigned_to"]) if row.get("assigned_to") else None,
        completed=bool(row.get("completed", False)),
    )


def _route_from_row(row: dict) -> DailyRoute:
    waypoints = sorted(
        (Waypoint.from_dict(item) for item in (row.get("waypoints") or [])),
        key=lambda waypoint: waypoint.sequence,
    )
    employee = row.get("employees") or {}
    return DailyRoute(
        id=str(row["id"]),
        company_id=str(row["company_id"]),
        employee_id=str(row["employee_id"]),
        date=_parse_date(row["date"]),
        waypoints=waypoints,
        total_distance_km=float(row.get("total_distance_km") or 0.0),
        estimated_duration_minutes=int(row.get("estimated_duration_minutes") or 0),
        optimized=bool(row.get("optimized", True)),
        version=int(row.get("version") or 1),
        employee_name=employee.get("name"),
    )


def _first(response: Any) -> Optional[dict]:
    data = response.data
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


class SupabaseRepository:
    backend_name = "supabase"

    def __init__(self, client: Client) -> None:
        self.client = client

    def get_company(self, company_id: str) -> Optional[Company]:
        if not _is_uuid(company_id):
            return None
        response = self.client.table("companies").select("id, name, tier_config").eq("id", company_id).limit(1).execute()
        row = _first(response)
        if row is None:
            return None
        return Company(id=str(row["id"]), name=row.get("name") or "", tier_config=row.get("tier_config"))

    def get_employee(self, company_id: str, employee_id: str) -> Optional[Employee]:
        if not _is_uuid(company_id, employee_id):
            return None
        response = (
            self.client.table("employees")
            .select("id, company_id, name, role, is_active")
            .eq("id", employee_id)
            .eq("company_id", company_id)
            .limit(1)
            .execute()
        )
        row = _first(response)
        if row is None:
            return None
        return Employee(
            id=str(row["id"]),
            company_id=str(row["company_id"]),
            name=row.get("name") or "",
            role=row.get("role") or "rep",
            is_active=bool(row.get("is_active", True)),
        )

    def get_store(self, company_id: str, store_id: str) -> Optional[Store]:
        if not _is_uuid(company_id, store_id):
            return None
        response = (
            self.client.table("stores")
            .select(STORE_COLUMNS)
            .eq("id", store_id)
            .eq("company_id", company_id)
            .limit(1)
            .execute()
        )
        row = _first(response)
        return _store_from_row(row) if row else None

    def get_stores(self, company_id: str, store_ids: Sequence[str]) -> list[Store]:
        ids = [store_id for store_id in dict.fromkeys(store_ids) if _is_uuid(store_id)]
        if not ids or not _is_uuid(company_id):
            return []
        response = (
            self.client.table("stores")
            .select(STORE_COLUMNS)
            .eq("company_id", company_id)
            .in_("id", ids)
            .execute()
        )
        by_id = {str(row["id"]): _store_from_row(row) for row in (response.data or [])}
        return [by_id[store_id] for store_id in ids if store_id in by_id]

    def list_company_stores(self, company_id: str, tiers: Iterable[str] | None = None) -> list[Store]:
        if not _is_uuid(company_id):
            return []
        query = self.client.table("stores").select(STORE_COLUMNS).eq("company_id", company_id)
        if tiers is not None:
            query = query.in_("tier", list(tiers))
        response = query.execute()
        return [_store_from_row(row) for row in (response.data or [])]

    def list_open_revisits(
        self,
        company_id: str,
        *,
        assigned_to: Optional[str] = None,
        due_on_or_before: Optional[date] = None,
        due_on: Optional[date] = None,
        store_id: Optional[str] = None,
    ) -> list[RevisitScheduleEntry]:
        filters = [company_id] + [value for value in (assigned_to, store_id) if value is not None]
        if not _is_uuid(*filters):
            return []
        query = (
            self.client.table("revisit_schedule")
            .select(REVISIT_COLUMNS)
            .eq("company_id", company_id)
            .eq("completed", False)
        )
        if assigned_to is not None:
            query = query.eq("assigned_to", assigned_to)
        if due_on_or_before is not None:
            query = query.lte("next_visit_date", due_on_or_before.isoformat())
        if due_on is not None:
            query = query.eq("next_visit_date", due_on.isoformat())
        if store_id is not None:
            query = query.eq("store_id", store_id)
        response = query.order("next_visit_date").order("store_id").execute()
        return [_revisit_from_row(row) for row in (response.data or [])]

    def replace_open_revisit(self, entry: RevisitScheduleEntry) -> RevisitScheduleEntry:
        if entry.assigned_to is not None and not _is_uuid(entry.assigned_to):
            raise InvalidInputError(f"Invalid employee id '{entry.assigned_to}'")
        response = self.client.rpc(
            "schedule_store_revisit",
            {
                "p_company_id": entry.company_id,
                "p_store_id": entry.store_id,
                "p_next_visit_date": entry.next_visit_date.isoformat(),
                "p_priority": entry.priority,
                "p_reason": entry.reason,
                "p_assigned_to": entry.assigned_to,
            },
        ).execute()
        row = _first(response)
        if row is None:
            raise RuntimeError(f"schedule_store_revisit returned no row for store {entry.store_id}")
        return _revisit_from_row(row)

    def get_route(self, company_id: str, employee_id: str, route_date: date) -> Optional[DailyRoute]:
        if not _is_uuid(company_id, employee_id):
            return None
        response = (
            self.client.table("daily_routes")
            .select(ROUTE_COLUMNS)
            .eq("company_id", company_id)
            .eq("employee_id", employee_id)
            .eq("date", route_date.isoformat())
            .limit(1)
            .execute()
        )
        row = _first(response)
        return _route_from_row(row) if row else None

    def get_route_by_id(self, company_id: str, route_id: str) -> Optional[DailyRoute]:
        if not _is_uuid(company_id, route_id):
            return None
        response = (
            self.client.table("daily_routes")
            .select(ROUTE_COLUMNS)
            .eq("id", route_id)
            .eq("company_id", company_id)
            .limit(1)
            .execute()
        )
        row = _first(response)
        return _route_from_row(row) if row else None

    def list_routes_for_date(self, company_id: str, route_date: date) -> list[DailyRoute]:
        if not _is_uuid(company_id):
            return []
        response = (
            self.client.table("daily_routes")
            .select(f"{ROUTE_COLUMNS}, employees(name)")
            .eq("company_id", company_id)
            .eq("date", route_date.isoformat())
            .execute()
        )
        routes = [_route_from_row(row) for row in (response.data or [])]
        return sorted(routes, key=lambda route: (route.employee_name or "", route.employee_id))

    def upsert_route(self, route: DailyRoute) -> DailyRoute:
        response = self.client.rpc(
            "upsert_daily_route",
            {
                "p_company_id": route.company_id,
                "p_employee_id": route.employee_id,
                "p_date": route.date.isoformat(),
                "p_waypoints": [waypoint.to_dict() for waypoint in route.waypoints],
                "p_total_distance_km": route.total_distance_km,
                "p_estimated_duration_minutes": route.estimated_duration_minutes,
                "p_optimized": route.optimized,
            },
        ).execute()
        row = _first(response)
        if row is None:
            raise RuntimeError(f"upsert_daily_route returned no row for employee {route.employee_id}")
        return _route_from_row(row)

    def update_route_waypoints(
        self,
        route_id: str,
        waypoints: Sequence[Waypoint],
        expected_version: int,
    ) -> Optional[DailyRoute]:
        response = (
            self.client.table("daily_routes")
            .update(
                {
                    "waypoints": [waypoint.to_dict() for waypoint in waypoints],
                    "version": expected_version + 1,
                }
            )
            .eq("id", route_id)
            .eq("version", expected_version)
            .execute()
        )
        row = _first(response)
        if row is None:
            logger.info(f"Version check failed for route {route_id} (expected {expected_version})")
            return None
        return _route_from_row(row)
