"""Data-access contract shared by the scheduling and routing services."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..models.domain import (
    Company,
    DailyRoute,
    Employee,
    RevisitScheduleEntry,
    Store,
    Waypoint,
)


class FieldRepository(Protocol):
    """Storage backend for companies, stores, revisit schedules and daily routes.

    Implementations must make ``replace_open_revisit`` atomic: readers never
    see a store with zero or two uncompleted entries while it runs.
    ``update_route_waypoints`` is a compare-and-swap on ``DailyRoute.version``
    and returns ``None`` when the stored version no longer matches.
    """

    backend_name: str

    def get_company(self, company_id: str) -> Optional[Company]: ...

    def get_employee(self, company_id: str, employee_id: str) -> Optional[Employee]: ...

    def get_store(self, company_id: str, store_id: str) -> Optional[Store]: ...

    def get_stores(self, company_id: str, store_ids: Sequence[str]) -> list[Store]: ...

    def list_company_stores(self, company_id: str, tiers: Iterable[str] | None = None) -> list[Store]: ...

    def list_open_revisits(
        self,
        company_id: str,
        *,
        assigned_to: Optional[str] = None,
        due_on_or_before: Optional[date] = None,
        due_on: Optional[date] = None,
        store_id: Optional[str] = None,
    ) -> list[RevisitScheduleEntry]: ...

    def replace_open_revisit(self, entry: RevisitScheduleEntry) -> RevisitScheduleEntry: ...

    def get_route(self, company_id: str, employee_id: str, route_date: date) -> Optional[DailyRoute]: ...

    def get_route_by_id(self, company_id: str, route_id: str) -> Optional[DailyRoute]: ...

    def list_routes_for_date(self, company_id: str, route_date: date) -> list[DailyRoute]: ...

    def upsert_route(self, route: DailyRoute) -> DailyRoute: ...

    def update_route_waypoints(
        self,
        route_id: str,
        waypoints: Sequence[Waypoint],
        expected_version: int,
    ) -> Optional[DailyRoute]: ...
