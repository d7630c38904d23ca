"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ...models.domain import DailyRoute, Store, Waypoint

PRIORITY_RANK: dict[str, int] = {
    "overdue": 0,
    "due_today": 1,
    "high_value_nearby": 2,
}


@dataclass(slots=True)
class RouteCandidate:
    store: Store
    priority: str

    @property
    def rank(self) -> int:
        return PRIORITY_RANK.get(self.priority, len(PRIORITY_RANK))


@dataclass(slots=True)
class OrderedStop:
    candidate: RouteCandidate
    distance_from_prev_km: float


@dataclass(slots=True)
class RouteResult:
    route: DailyRoute

    @property
    def waypoints(self) -> List[Waypoint]:
        return self.route.waypoints

    @property
    def total_distance_km(self) -> float:
        return self.route.total_distance_km

    @property
    def estimated_duration_minutes(self) -> int:
        return self.route.estimated_duration_minutes
