"""Revisit scheduling orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ...errors import InvalidInputError, NotFoundError
from ...models.domain import STOCK_STATUSES, RevisitScheduleEntry, Store
from ...persistence.repository import FieldRepository
from ..access import is_manager, require_employee
from .rules import decide_revisit, resolve_store_tier, resolve_tier_config

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RevisitAlert:
    entry: RevisitScheduleEntry
    store_name: str
    tier: str
    overdue: bool


@dataclass(slots=True)
class RevisitReminder:
    employee_id: str
    store_id: str
    schedule_id: Optional[str]
    title: str
    message: str
    priority: str
    next_visit_date: date


def schedule_next_revisit(
    repository: FieldRepository,
    company_id: str,
    store_id: str,
    employee_id: Optional[str],
    stock_status: str,
    *,
    today: Optional[date] = None,
) -> RevisitScheduleEntry:
    """Retire the store's open revisit entry and schedule the next one.

    A company without ``tier_config`` or a store without a tier is not an
    error; defaults apply. A missing company or store row is.
    """

    if stock_status not in STOCK_STATUSES:
        raise InvalidInputError(
            f"Unknown stock_status '{stock_status}'. Expected one of: {', '.join(STOCK_STATUSES)}"
        )

    company = repository.get_company(company_id)
    store = repository.get_store(company_id, store_id) if company else None
    if company is None or store is None:
        raise NotFoundError("Company or store not found")

    tier_config = resolve_tier_config(company.tier_config)
    tier = resolve_store_tier(store.tier)
    decision = decide_revisit(stock_status, tier_config.revisit_days(tier))

    scheduled_on = today or date.today()
    entry = RevisitScheduleEntry(
        store_id=store.id,
        company_id=company.id,
        next_visit_date=scheduled_on + timedelta(days=decision.days_until_revisit),
        priority=decision.priority,
        reason=decision.reason,
        assigned_to=employee_id,
    )
    saved = repository.replace_open_revisit(entry)
    logger.info(
        f"Scheduled {saved.priority} revisit for store {store.id} (tier {tier}) on "
        f"{saved.next_visit_date.isoformat()} reason={saved.reason}"
    )
    return saved


def _store_lookup(repository: FieldRepository, company_id: str, entries: list[RevisitScheduleEntry]) -> dict[str, Store]:
    store_ids = [entry.store_id for entry in entries]
    if not store_ids:
        return {}
    return {store.id: store for store in repository.get_stores(company_id, store_ids)}


def list_revisit_alerts(
    repository: FieldRepository,
    company_id: str,
    *,
    assigned_to: Optional[str] = None,
    today: Optional[date] = None,
) -> list[RevisitAlert]:
    """Open revisit entries ordered by due date; ``assigned_to`` narrows to one rep."""

    reference = today or date.today()
    entries = repository.list_open_revisits(company_id, assigned_to=assigned_to)
    stores = _store_lookup(repository, company_id, entries)
    alerts = []
    for entry in entries:
        store = stores.get(entry.store_id)
        alerts.append(
            RevisitAlert(
                entry=entry,
                store_name=(store.name if store else entry.store_id),
                tier=resolve_store_tier(store.tier if store else None),
                overdue=entry.next_visit_date < reference,
            )
        )
    return alerts


def list_alerts_for_employee(
    repository: FieldRepository,
    company_id: str,
    employee_id: str,
    *,
    today: Optional[date] = None,
) -> list[RevisitAlert]:
    """Alerts scoped by the employee's stored role: managers see the company, everyone else their own."""

    employee = require_employee(repository, company_id, employee_id)
    assigned_to = None if is_manager(employee) else employee.id
    return list_revisit_alerts(repository, company_id, assigned_to=assigned_to, today=today)


def collect_revisit_reminders(
    repository: FieldRepository,
    company_id: str,
    *,
    today: Optional[date] = None,
) -> list[RevisitReminder]:
    """Reminder payloads for assigned entries due the day after ``today``.

    The notification job delivers these; nothing here sends anything.
    """

    due = (today or date.today()) + timedelta(days=1)
    entries = [
        entry
        for entry in repository.list_open_revisits(company_id, due_on=due)
        if entry.assigned_to
    ]
    stores = _store_lookup(repository, company_id, entries)
    reminders = []
    for entry in entries:
        store = stores.get(entry.store_id)
        store_name = (store.name_zh or store.name) if store else entry.store_id
        tier = resolve_store_tier(store.tier if store else None)
        prefix = "[URGENT] " if entry.priority == "high" else ""
        reminders.append(
            RevisitReminder(
                employee_id=entry.assigned_to,
                store_id=entry.store_id,
                schedule_id=entry.id,
                title=f"{prefix}Revisit Reminder: {store_name}",
                message=(
                    f"You have a {entry.priority} priority revisit scheduled for tomorrow at "
                    f"{store_name} (Tier {tier}). Reason: {entry.reason}."
                ),
                priority=entry.priority,
                next_visit_date=entry.next_visit_date,
            )
        )
    logger.info(f"Collected {len(reminders)} revisit reminders for company {company_id} due {due.isoformat()}")
    return reminders
