"""Thread-safe in-memory repository.

Backs the test suite and local runs without Supabase credentials. A single
re-entrant lock serialises every write, which gives the same visibility
guarantees the database functions give in production.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..models.domain import (
    Company,
    DailyRoute,
    Employee,
    RevisitScheduleEntry,
    Store,
    Waypoint,
)


class InMemoryRepository:
    backend_name = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._companies: dict[str, Company] = {}
        self._employees: dict[str, Employee] = {}
        self._stores: dict[str, Store] = {}
        self._revisits: list[RevisitScheduleEntry] = []
        self._routes: dict[str, DailyRoute] = {}

    # Seeding helpers -----------------------------------------------------

    def add_company(self, company: Company) -> Company:
        with self._lock:
            self._companies[company.id] = company
        return company

    def add_employee(self, employee: Employee) -> Employee:
        with self._lock:
            self._employees[employee.id] = employee
        return employee

    def add_store(self, store: Store) -> Store:
        with self._lock:
            self._stores[store.id] = store
        return store

    def add_revisit(self, entry: RevisitScheduleEntry) -> RevisitScheduleEntry:
        """Insert an entry as-is, bypassing the supersession rule (fixtures only)."""
        with self._lock:
            stored = replace(entry, id=entry.id or str(uuid.uuid4()))
            self._revisits.append(stored)
        return replace(stored)

    def all_revisits(self, store_id: Optional[str] = None) -> list[RevisitScheduleEntry]:
        with self._lock:
            return [replace(entry) for entry in self._revisits if store_id is None or entry.store_id == store_id]

    def all_routes(self) -> list[DailyRoute]:
        with self._lock:
            return [route.copy() for route in self._routes.values()]

    # FieldRepository -----------------------------------------------------

    def get_company(self, company_id: str) -> Optional[Company]:
        with self._lock:
            company = self._companies.get(company_id)
            return replace(company) if company else None

    def get_employee(self, company_id: str, employee_id: str) -> Optional[Employee]:
        with self._lock:
            employee = self._employees.get(employee_id)
            if employee is None or employee.company_id != company_id:
                return None
            return replace(employee)

    def get_store(self, company_id: str, store_id: str) -> Optional[Store]:
        with self._lock:
            store = self._stores.get(store_id)
            if store is None or store.company_id != company_id:
                return None
            return replace(store)

    def get_stores(self, company_id: str, store_ids: Sequence[str]) -> list[Store]:
        with self._lock:
            found = []
            for store_id in dict.fromkeys(store_ids):
                store = self._stores.get(store_id)
                if store is not None and store.company_id == company_id:
                    found.append(replace(store))
            return found

    def list_company_stores(self, company_id: str, tiers: Iterable[str] | None = None) -> list[Store]:
        tier_set = set(tiers) if tiers is not None else None
        with self._lock:
            return [
                replace(store)
                for store in self._stores.values()
                if store.company_id == company_id and (tier_set is None or store.tier in tier_set)
            ]

    def list_open_revisits(
        self,
        company_id: str,
        *,
        assigned_to: Optional[str] = None,
        due_on_or_before: Optional[date] = None,
        due_on: Optional[date] = None,
        store_id: Optional[str] = None,
    ) -> list[RevisitScheduleEntry]:
        with self._lock:
            matches = [
                replace(entry)
                for entry in self._revisits
                if entry.company_id == company_id
                and not entry.completed
                and (assigned_to is None or entry.assigned_to == assigned_to)
                and (due_on_or_before is None or entry.next_visit_date <= due_on_or_before)
                and (due_on is None or entry.next_visit_date == due_on)
                and (store_id is None or entry.store_id == store_id)
            ]
        return sorted(matches, key=lambda entry: (entry.next_visit_date, entry.store_id))

    def replace_open_revisit(self, entry: RevisitScheduleEntry) -> RevisitScheduleEntry:
        with self._lock:
            for existing in self._revisits:
                if (
                    existing.store_id == entry.store_id
                    and existing.company_id == entry.company_id
                    and not existing.completed
                ):
                    existing.completed = True
            stored = replace(entry, id=str(uuid.uuid4()), completed=False)
            self._revisits.append(stored)
            return replace(stored)

    def get_route(self, company_id: str, employee_id: str, route_date: date) -> Optional[DailyRoute]:
        with self._lock:
            for route in self._routes.values():
                if route.company_id == company_id and route.employee_id == employee_id and route.date == route_date:
                    return route.copy()
        return None

    def get_route_by_id(self, company_id: str, route_id: str) -> Optional[DailyRoute]:
        with self._lock:
            route = self._routes.get(route_id)
            if route is None or route.company_id != company_id:
                return None
            return route.copy()

    def list_routes_for_date(self, company_id: str, route_date: date) -> list[DailyRoute]:
        with self._lock:
            routes = []
            for route in self._routes.values():
                if route.company_id != company_id or route.date != route_date:
                    continue
                stored = route.copy()
                employee = self._employees.get(route.employee_id)
                stored.employee_name = employee.name if employee else None
                routes.append(stored)
        return sorted(routes, key=lambda route: (route.employee_name or "", route.employee_id))

    def upsert_route(self, route: DailyRoute) -> DailyRoute:
        with self._lock:
            existing = None
            for candidate in self._routes.values():
                if candidate.employee_id == route.employee_id and candidate.date == route.date:
                    existing = candidate
                    break
            stored = route.copy()
            if existing is not None:
                stored.id = existing.id
                stored.version = existing.version + 1
            else:
                stored.id = str(uuid.uuid4())
                stored.version = 1
            self._routes[stored.id] = stored
            return stored.copy()

    def update_route_waypoints(
        self,
        route_id: str,
        waypoints: Sequence[Waypoint],
        expected_version: int,
    ) -> Optional[DailyRoute]:
        with self._lock:
            route = self._routes.get(route_id)
            if route is None or route.version != expected_version:
                return None
            route.waypoints = [replace(waypoint) for waypoint in waypoints]
            route.version += 1
            return route.copy()
