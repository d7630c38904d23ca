"""Revisit schedule endpoints: scheduling after a visit, alerts and reminders."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from ...persistence import FieldRepository
from ...schemas.scheduling import (
    RevisitAlertModel,
    RevisitAlertsResponse,
    RevisitEntryModel,
    RevisitEntryResponse,
    RevisitReminderModel,
    RevisitRemindersResponse,
    ScheduleRevisitRequest,
)
from ...services.routing.service import parse_route_date
from ...services.scheduling.service import (
    collect_revisit_reminders,
    list_alerts_for_employee,
    schedule_next_revisit,
)
from ..deps import CallerContext, CallerDep, RepositoryDep

router = APIRouter(tags=["revisits"])


@router.post("/revisits", response_model=RevisitEntryResponse, status_code=status.HTTP_201_CREATED)
def schedule_revisit(
    payload: ScheduleRevisitRequest,
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RevisitEntryResponse:
    """Record a visit outcome and schedule the store's next revisit."""
    entry = schedule_next_revisit(
        repository,
        caller.company_id,
        payload.store_id,
        payload.employee_id or caller.employee_id,
        payload.stock_status,
    )
    return RevisitEntryResponse(data=RevisitEntryModel.from_domain(entry))


@router.get("/alerts", response_model=RevisitAlertsResponse, status_code=status.HTTP_200_OK)
def list_alerts(
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RevisitAlertsResponse:
    """Open revisit entries; only manager roles see the whole company."""
    alerts = list_alerts_for_employee(repository, caller.company_id, caller.employee_id)
    return RevisitAlertsResponse(data=[RevisitAlertModel.from_alert(alert) for alert in alerts])


@router.get("/revisits/reminders", response_model=RevisitRemindersResponse, status_code=status.HTTP_200_OK)
def list_reminders(
    date: Optional[str] = Query(default=None, description="Reference day (YYYY-MM-DD); reminders cover the next day."),
    caller: CallerContext = CallerDep,
    repository: FieldRepository = RepositoryDep,
) -> RevisitRemindersResponse:
    reminders = collect_revisit_reminders(repository, caller.company_id, today=parse_route_date(date))
    return RevisitRemindersResponse(data=[RevisitReminderModel.from_reminder(item) for item in reminders])
