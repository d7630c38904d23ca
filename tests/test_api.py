from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from fieldroute.api.deps import repository_dependency
from fieldroute.main import create_app
from fieldroute.models.domain import Employee, RevisitScheduleEntry

REP = {"X-Company-Id": "co1", "X-Employee-Id": "rep1"}
MANAGER = {"X-Company-Id": "co1", "X-Employee-Id": "mgr1"}


@pytest.fixture
def api_client(repository, make_store) -> TestClient:
    repository.add_store(make_store("store1", 31.2350, 121.4800, tier="A"))
    repository.add_store(make_store("store2", 31.2200, 121.4600, tier="B"))
    today = date.today()
    repository.add_revisit(RevisitScheduleEntry("store1", "co1", today - timedelta(days=1), "high", "low_stock", "rep1"))
    repository.add_revisit(RevisitScheduleEntry("store2", "co1", today, "normal", "scheduled", "rep1"))

    app = create_app()
    app.dependency_overrides[repository_dependency] = lambda: repository
    return TestClient(app)


def test_health(api_client: TestClient):
    assert api_client.get("/api/health").json() == {"status": "ok"}
    payload = api_client.get("/api/health/database").json()
    assert payload["backend"] == "memory"
    assert payload["configured"] is False


def test_optimize_then_read_today(api_client: TestClient):
    response = api_client.post("/api/routes", json={"start_lat": 31.2304, "start_lng": 121.4737}, headers=REP)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    route = body["data"]
    assert [wp["sequence"] for wp in route["waypoints"]] == [0, 1]
    assert route["date"] == date.today().isoformat()

    today = api_client.get("/api/routes/today", headers=REP).json()
    assert today["data"]["id"] == route["id"]
    by_date = api_client.get(f"/api/routes/{date.today().isoformat()}", headers=REP).json()
    assert by_date["data"]["id"] == route["id"]


def test_optimize_with_explicit_date_and_stores(api_client: TestClient):
    response = api_client.post(
        "/api/routes",
        json={"start_lat": 31.2304, "start_lng": 121.4737, "date": "2026-11-02", "store_ids": ["store2"]},
        headers=REP,
    )

    assert response.status_code == 200
    route = response.json()["data"]
    assert route["date"] == "2026-11-02"
    assert [wp["store_id"] for wp in route["waypoints"]] == ["store2"]


def test_missing_start_coordinates_is_400(api_client: TestClient):
    response = api_client.post("/api/routes", json={"start_lng": 121.4737}, headers=REP)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "start_lat and start_lng are required"}


@pytest.mark.parametrize("value", ["2026-1-5", "2024-W01-1"])
def test_bad_date_is_400(api_client: TestClient, value):
    response = api_client.get(f"/api/routes/{value}", headers=REP)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_no_route_returns_null_data(api_client: TestClient):
    response = api_client.get("/api/routes/2030-01-01", headers=REP)

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}


def test_unknown_employee_is_404(api_client: TestClient):
    headers = {**REP, "X-Employee-Id": "ghost"}
    response = api_client.post("/api/routes", json={"start_lat": 31.23, "start_lng": 121.47}, headers=headers)

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_mark_waypoint_visited(api_client: TestClient):
    route = api_client.post("/api/routes", json={"start_lat": 31.2304, "start_lng": 121.4737}, headers=REP).json()["data"]

    response = api_client.patch(f"/api/routes/{route['id']}/waypoints/0", headers=REP)

    assert response.status_code == 200
    waypoints = response.json()["data"]["waypoints"]
    assert [wp["visited"] for wp in waypoints] == [True, False]

    missing = api_client.patch(f"/api/routes/{route['id']}/waypoints/9", headers=REP)
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Waypoint with sequence 9 not found"}


def test_team_view_is_manager_only(api_client: TestClient, repository):
    repository.add_employee(Employee(id="rep2", company_id="co1", name="Chen Hao", role="rep"))
    start = {"start_lat": 31.2304, "start_lng": 121.4737}
    api_client.post("/api/routes", json=start, headers=REP)
    api_client.post("/api/routes", json=start, headers={**REP, "X-Employee-Id": "rep2"})

    assert api_client.get("/api/routes/team/today", headers=REP).status_code == 403
    response = api_client.get("/api/routes/team/today", headers=MANAGER)
    assert response.status_code == 200
    team = [(route["employee_id"], route["employee_name"]) for route in response.json()["data"]]
    assert team == [("rep2", "Chen Hao"), ("rep1", "Li Wei")]


def test_role_header_does_not_widen_alert_scope(api_client: TestClient, repository, make_store):
    repository.add_store(make_store("store3", 31.2250, 121.4700, tier="C"))
    repository.add_revisit(RevisitScheduleEntry("store3", "co1", date.today(), "normal", "scheduled", "mgr1"))

    claimed = api_client.get("/api/alerts", headers={**REP, "X-Employee-Role": "area_manager"}).json()["data"]
    assert [alert["store_id"] for alert in claimed] == ["store1", "store2"]

    company = api_client.get("/api/alerts", headers=MANAGER).json()["data"]
    assert sorted(alert["store_id"] for alert in company) == ["store1", "store2", "store3"]


def test_schedule_revisit_and_alerts(api_client: TestClient, repository):
    response = api_client.post("/api/revisits", json={"store_id": "store2", "stock_status": "out_of_stock"}, headers=REP)

    assert response.status_code == 201
    entry = response.json()["data"]
    assert entry["priority"] == "high"
    assert entry["reason"] == "oos_detected"
    assert entry["next_visit_date"] == (date.today() + timedelta(days=2)).isoformat()
    assert entry["assigned_to"] == "rep1"
    assert len([e for e in repository.all_revisits("store2") if not e.completed]) == 1

    alerts = api_client.get("/api/alerts", headers=REP).json()["data"]
    assert [alert["store_id"] for alert in alerts] == ["store1", "store2"]
    assert alerts[0]["overdue"] is True


def test_schedule_revisit_validation_and_not_found(api_client: TestClient):
    bad_status = api_client.post("/api/revisits", json={"store_id": "store2", "stock_status": "gone"}, headers=REP)
    assert bad_status.status_code == 400

    missing = api_client.post("/api/revisits", json={"store_id": "nope", "stock_status": "in_stock"}, headers=REP)
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Company or store not found"}


def test_reminders_endpoint(api_client: TestClient):
    yesterday = (date.today() - timedelta(days=1)).isoformat()

    response = api_client.get("/api/revisits/reminders", params={"date": yesterday}, headers=MANAGER)

    assert response.status_code == 200
    reminders = response.json()["data"]
    assert [item["store_id"] for item in reminders] == ["store2"]
    assert reminders[0]["type"] == "revisit_reminder"
