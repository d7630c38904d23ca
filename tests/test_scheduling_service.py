import threading
from datetime import date, timedelta

import pytest

from fieldroute.errors import InvalidInputError, NotFoundError
from fieldroute.models.domain import Company, RevisitScheduleEntry
from fieldroute.services.scheduling.service import (
    collect_revisit_reminders,
    list_alerts_for_employee,
    list_revisit_alerts,
    schedule_next_revisit,
)

TODAY = date(2026, 10, 19)


@pytest.mark.parametrize("tier, days", [("A", 7), ("B", 14), ("C", 30)])
def test_in_stock_follows_tier_cadence(repository, make_store, tier, days):
    repository.add_store(make_store("s1", 31.23, 121.47, tier=tier))

    entry = schedule_next_revisit(repository, "co1", "s1", "rep1", "in_stock", today=TODAY)

    assert entry.next_visit_date == TODAY + timedelta(days=days)
    assert (entry.priority, entry.reason) == ("normal", "scheduled")
    assert entry.assigned_to == "rep1"
    assert entry.id is not None
    assert entry.completed is False


def test_out_of_stock_escalates_regardless_of_tier(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, tier="C"))

    entry = schedule_next_revisit(repository, "co1", "s1", "rep1", "out_of_stock", today=TODAY)

    assert entry.next_visit_date == TODAY + timedelta(days=2)
    assert (entry.priority, entry.reason) == ("high", "oos_detected")


def test_low_stock_on_tier_c_waits_fifteen_days(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, tier="C"))

    entry = schedule_next_revisit(repository, "co1", "s1", "rep1", "low_stock", today=TODAY)

    assert entry.next_visit_date == TODAY + timedelta(days=15)
    assert (entry.priority, entry.reason) == ("high", "low_stock")


def test_company_tier_config_overrides_defaults(repository, make_store):
    repository.add_company(Company(id="co2", name="Tiny", tier_config={"A": {"revisit_days": 4}}))
    repository.add_store(make_store("s9", 31.23, 121.47, tier="A", company_id="co2"))

    entry = schedule_next_revisit(repository, "co2", "s9", None, "low_stock", today=TODAY)

    assert entry.next_visit_date == TODAY + timedelta(days=3)
    assert entry.assigned_to is None


def test_store_without_tier_uses_tier_c(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, tier=None))

    entry = schedule_next_revisit(repository, "co1", "s1", "rep1", "in_stock", today=TODAY)

    assert entry.next_visit_date == TODAY + timedelta(days=30)


def test_only_one_open_entry_after_repeated_scheduling(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47))
    repository.add_store(make_store("s2", 31.24, 121.48))
    schedule_next_revisit(repository, "co1", "s2", "rep1", "in_stock", today=TODAY)

    statuses = ["in_stock", "out_of_stock", "low_stock", "added_product", "in_stock"]
    for status in statuses:
        last = schedule_next_revisit(repository, "co1", "s1", "rep1", status, today=TODAY)

    entries = repository.all_revisits("s1")
    open_entries = [entry for entry in entries if not entry.completed]
    assert len(entries) == len(statuses)
    assert [entry.id for entry in open_entries] == [last.id]
    # other stores are untouched
    assert len([e for e in repository.all_revisits("s2") if not e.completed]) == 1


def test_concurrent_scheduling_keeps_single_open_entry(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47))

    def worker(status):
        for _ in range(20):
            schedule_next_revisit(repository, "co1", "s1", "rep1", status, today=TODAY)

    threads = [threading.Thread(target=worker, args=(status,)) for status in ("in_stock", "low_stock", "out_of_stock")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    entries = repository.all_revisits("s1")
    assert len(entries) == 60
    assert len([entry for entry in entries if not entry.completed]) == 1


def test_missing_company_or_store_is_not_found(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47))

    with pytest.raises(NotFoundError):
        schedule_next_revisit(repository, "nope", "s1", "rep1", "in_stock", today=TODAY)
    with pytest.raises(NotFoundError):
        schedule_next_revisit(repository, "co1", "missing", "rep1", "in_stock", today=TODAY)
    assert repository.all_revisits() == []


def test_store_from_other_company_is_not_found(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, company_id="other"))

    with pytest.raises(NotFoundError):
        schedule_next_revisit(repository, "co1", "s1", "rep1", "in_stock", today=TODAY)


def test_unknown_stock_status_is_invalid(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47))

    with pytest.raises(InvalidInputError):
        schedule_next_revisit(repository, "co1", "s1", "rep1", "sold_out", today=TODAY)


def test_alerts_are_ordered_and_flag_overdue(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, tier="A"))
    repository.add_store(make_store("s2", 31.24, 121.48, tier="B"))
    repository.add_revisit(
        RevisitScheduleEntry("s2", "co1", TODAY + timedelta(days=3), "normal", "scheduled", assigned_to="rep1")
    )
    repository.add_revisit(
        RevisitScheduleEntry("s1", "co1", TODAY - timedelta(days=1), "high", "oos_detected", assigned_to="mgr1")
    )

    alerts = list_revisit_alerts(repository, "co1", today=TODAY)
    assert [alert.entry.store_id for alert in alerts] == ["s1", "s2"]
    assert [alert.overdue for alert in alerts] == [True, False]
    assert alerts[0].store_name == "Store s1"

    mine = list_revisit_alerts(repository, "co1", assigned_to="rep1", today=TODAY)
    assert [alert.entry.store_id for alert in mine] == ["s2"]


def test_reminders_cover_tomorrow_for_assigned_entries(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, tier="A"))
    repository.add_store(make_store("s2", 31.24, 121.48, tier="B"))
    repository.add_store(make_store("s3", 31.25, 121.49, tier="C"))
    tomorrow = TODAY + timedelta(days=1)
    repository.add_revisit(RevisitScheduleEntry("s1", "co1", tomorrow, "high", "oos_detected", assigned_to="rep1"))
    repository.add_revisit(RevisitScheduleEntry("s2", "co1", tomorrow, "normal", "scheduled", assigned_to=None))
    repository.add_revisit(RevisitScheduleEntry("s3", "co1", TODAY, "normal", "scheduled", assigned_to="rep1"))

    reminders = collect_revisit_reminders(repository, "co1", today=TODAY)

    assert len(reminders) == 1
    reminder = reminders[0]
    assert reminder.employee_id == "rep1"
    assert reminder.title == "[URGENT] Revisit Reminder: Store s1"
    assert "Tier A" in reminder.message
    assert "oos_detected" in reminder.message
    assert reminder.next_visit_date == date(2026, 10, 20)


def test_alert_scope_follows_stored_role(repository, make_store):
    repository.add_store(make_store("s1", 31.23, 121.47, tier="A"))
    repository.add_store(make_store("s2", 31.24, 121.48, tier="B"))
    repository.add_revisit(RevisitScheduleEntry("s1", "co1", TODAY, "normal", "scheduled", assigned_to="rep1"))
    repository.add_revisit(RevisitScheduleEntry("s2", "co1", TODAY, "normal", "scheduled", assigned_to="mgr1"))

    mine = list_alerts_for_employee(repository, "co1", "rep1", today=TODAY)
    everyone = list_alerts_for_employee(repository, "co1", "mgr1", today=TODAY)

    assert [alert.entry.store_id for alert in mine] == ["s1"]
    assert [alert.entry.store_id for alert in everyone] == ["s1", "s2"]
    with pytest.raises(NotFoundError):
        list_alerts_for_employee(repository, "co1", "ghost", today=TODAY)
