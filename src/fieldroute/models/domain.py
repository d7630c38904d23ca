"""Domain models for companies, stores, revisit schedules and daily routes."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from typing import Literal, Optional

Tier = Literal["A", "B", "C"]
StockStatus = Literal["in_stock", "low_stock", "out_of_stock", "added_product"]
RevisitPriority = Literal["high", "normal", "low"]
RevisitReason = Literal["scheduled", "oos_detected", "low_stock", "new_product"]
RoutePriority = Literal["overdue", "due_today", "high_value_nearby"]

TIERS: tuple[str, ...] = ("A", "B", "C")
STOCK_STATUSES: tuple[str, ...] = ("in_stock", "low_stock", "out_of_stock", "added_product")


@dataclass(slots=True, frozen=True)
class TierConfig:
    """Revisit cadence, in days, for each store tier."""

    a_days: int
    b_days: int
    c_days: int

    def revisit_days(self, tier: str) -> int:
        return {"A": self.a_days, "B": self.b_days, "C": self.c_days}[tier]

    def to_dict(self) -> dict:
        return {
            "A": {"revisit_days": self.a_days},
            "B": {"revisit_days": self.b_days},
            "C": {"revisit_days": self.c_days},
        }


@dataclass(slots=True)
class Company:
    id: str
    name: str
    tier_config: Optional[dict] = None


@dataclass(slots=True)
class Employee:
    id: str
    company_id: str
    name: str
    role: str = "rep"
    is_active: bool = True


@dataclass(slots=True)
class Store:
    """A retail outlet visited by field reps."""

    id: str
    company_id: str
    name: str
    latitude: float
    longitude: float
    tier: Optional[str] = None
    store_type: str = "other"
    name_zh: Optional[str] = None


@dataclass(slots=True)
class RevisitScheduleEntry:
    """One obligation to return to a store by ``next_visit_date``."""

    store_id: str
    company_id: str
    next_visit_date: date
    priority: str
    reason: str
    assigned_to: Optional[str] = None
    completed: bool = False
    id: Optional[str] = None


@dataclass(slots=True)
class Waypoint:
    store_id: str
    store_name: str
    tier: str
    latitude: float
    longitude: float
    priority: str
    estimated_arrival: str
    estimated_duration_minutes: int
    sequence: int
    visited: bool = False
    distance_from_prev_km: float = 0.0
    store_name_zh: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> "Waypoint":
        return cls(
            store_id=str(payload["store_id"]),
            store_name=payload.get("store_name") or "",
            tier=payload.get("tier") or "C",
            latitude=float(payload["latitude"]),
            longitude=float(payload["longitude"]),
            priority=payload.get("priority") or "due_today",
            estimated_arrival=payload.get("estimated_arrival") or "",
            estimated_duration_minutes=int(payload.get("estimated_duration_minutes") or 0),
            sequence=int(payload["sequence"]),
            visited=bool(payload.get("visited", False)),
            distance_from_prev_km=float(payload.get("distance_from_prev_km") or 0.0),
            store_name_zh=payload.get("store_name_zh"),
        )


@dataclass(slots=True)
class DailyRoute:
    """The optimised route for one (employee, date) pair."""

    company_id: str
    employee_id: str
    date: date
    waypoints: list[Waypoint] = field(default_factory=list)
    total_distance_km: float = 0.0
    estimated_duration_minutes: int = 0
    optimized: bool = True
    version: int = 1
    employee_name: Optional[str] = None
    id: Optional[str] = None

    def copy(self) -> "DailyRoute":
        return replace(self, waypoints=[replace(waypoint) for waypoint in self.waypoints])
