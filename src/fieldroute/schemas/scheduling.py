"""Revisit scheduling request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import RevisitScheduleEntry
from ..services.scheduling.service import RevisitAlert, RevisitReminder


class ScheduleRevisitRequest(BaseModel):
    store_id: str
    stock_status: Literal["in_stock", "low_stock", "out_of_stock", "added_product"]
    employee_id: Optional[str] = Field(
        default=None,
        description="Rep to assign the revisit to; defaults to the caller.",
    )


class RevisitEntryModel(BaseModel):
    id: Optional[str]
    store_id: str
    company_id: str
    next_visit_date: str
    priority: str
    reason: str
    assigned_to: Optional[str]
    completed: bool

    @classmethod
    def from_domain(cls, entry: RevisitScheduleEntry) -> "RevisitEntryModel":
        return cls(
            id=entry.id,
            store_id=entry.store_id,
            company_id=entry.company_id,
            next_visit_date=entry.next_visit_date.isoformat(),
            priority=entry.priority,
            reason=entry.reason,
            assigned_to=entry.assigned_to,
            completed=entry.completed,
        )


class RevisitAlertModel(RevisitEntryModel):
    store_name: str
    tier: str
    overdue: bool

    @classmethod
    def from_alert(cls, alert: RevisitAlert) -> "RevisitAlertModel":
        base = RevisitEntryModel.from_domain(alert.entry).model_dump()
        return cls(**base, store_name=alert.store_name, tier=alert.tier, overdue=alert.overdue)


class RevisitReminderModel(BaseModel):
    employee_id: str
    store_id: str
    schedule_id: Optional[str]
    type: str = "revisit_reminder"
    title: str
    message: str
    priority: str
    next_visit_date: str

    @classmethod
    def from_reminder(cls, reminder: RevisitReminder) -> "RevisitReminderModel":
        return cls(
            employee_id=reminder.employee_id,
            store_id=reminder.store_id,
            schedule_id=reminder.schedule_id,
            title=reminder.title,
            message=reminder.message,
            priority=reminder.priority,
            next_visit_date=reminder.next_visit_date.isoformat(),
        )


class RevisitEntryResponse(BaseModel):
    success: bool = True
    data: RevisitEntryModel


class RevisitAlertsResponse(BaseModel):
    success: bool = True
    data: List[RevisitAlertModel]


class RevisitRemindersResponse(BaseModel):
    success: bool = True
    data: List[RevisitReminderModel]
