from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from conftest import login

from app.rdcpm.modules.dashboard.health import (
    HealthInputs,
    budget_health,
    calculate_health_score,
    inputs_from_payload,
    inputs_from_project,
    issue_health,
    resource_health,
    risk_health,
    status_and_color,
    timeline_health,
)


def _inputs(**kw) -> HealthInputs:
    base = dict(start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), current_date=date(2025, 7, 1))
    base.update(kw)
    return HealthInputs(**base)


# ---------- health factors ----------
def test_timeline_not_started_is_full():
    assert timeline_health(_inputs(current_date=date(2024, 12, 1))) == 100.0


def test_timeline_overdue_penalty():
    # 10 days past the end date
    assert timeline_health(_inputs(current_date=date(2026, 1, 10))) == 30.0
    assert timeline_health(_inputs(current_date=date(2026, 3, 1))) == 0.0


def test_timeline_ahead_of_schedule_gets_bonus():
    d = _inputs(completed_tasks=9, total_tasks=10)
    expected = (date(2025, 7, 1) - date(2025, 1, 1)).days / 364 * 100
    assert timeline_health(d) == pytest.approx(min(100.0, 100 - abs(expected - 90) + 10))


def test_timeline_without_tasks_counts_zero_progress():
    d = _inputs()
    expected = (date(2025, 7, 1) - date(2025, 1, 1)).days / 364 * 100
    assert timeline_health(d) == pytest.approx(100 - expected)


def test_budget_bands():
    assert budget_health(_inputs(budget_allocated=0)) == 100.0
    assert budget_health(_inputs(budget_allocated=100, budget_spent=80)) == 100.0
    assert budget_health(_inputs(budget_allocated=100, budget_spent=50)) == 60.0
    assert budget_health(_inputs(budget_allocated=100, budget_spent=65)) == 90.0
    assert budget_health(_inputs(budget_allocated=100, budget_spent=100)) == 70.0
    assert budget_health(_inputs(budget_allocated=100, budget_spent=200)) == 0.0


def test_resource_bands():
    assert resource_health(_inputs(required_resources=0)) == 100.0
    assert resource_health(_inputs(assigned_resources=5, required_resources=10)) == 50.0
    assert resource_health(_inputs(assigned_resources=10, required_resources=10)) == 100.0
    assert resource_health(_inputs(assigned_resources=13, required_resources=10)) == 60.0


def test_risk_and_issue_penalties():
    assert risk_health(_inputs(high_risks=2, medium_risks=3, low_risks=5)) == 55.0
    assert issue_health(_inputs()) == 100.0
    assert issue_health(_inputs(open_issues=2, critical_issues=1, resolved_issues=4)) == 75.0


@pytest.mark.parametrize(
    "score,expected",
    [(95, ("excellent", "green")), (80, ("good", "yellow")), (75, ("fair", "orange")), (60, ("poor", "red")), (59.9, ("critical", "dark-red"))],
)
def test_status_bands(score, expected):
    assert status_and_color(score) == expected


def test_healthy_project_score():
    d = _inputs(
        current_date=date(2024, 12, 1),
        budget_allocated=100,
        budget_spent=80,
        assigned_resources=10,
        required_resources=10,
    )
    result = calculate_health_score(d)
    assert result["overallScore"] == 100
    assert result["healthStatus"] == "excellent"
    assert result["recommendations"] == []


def test_critical_project_recommendations():
    d = _inputs(
        current_date=date(2026, 3, 1),
        budget_allocated=100,
        budget_spent=150,
        assigned_resources=1,
        required_resources=10,
        high_risks=5,
        completed_tasks=1,
        total_tasks=10,
        open_issues=5,
        critical_issues=3,
    )
    result = calculate_health_score(d)
    assert result["healthStatus"] == "critical"
    recs = result["recommendations"]
    assert "Budget overrun detected - review expenses immediately" in recs
    assert "Consider hiring additional team members" in recs
    assert recs[-2:] == [
        "Project health is critical - escalate to senior management",
        "Consider project restart or major scope reduction",
    ]


def test_inputs_from_payload_requires_dates():
    with pytest.raises(ValueError):
        inputs_from_payload({"startDate": "2025-01-01"})
    with pytest.raises(ValueError):
        inputs_from_payload({"startDate": "2025-01-01", "endDate": "2025-02-01", "highRisks": -1})


def test_inputs_from_project_derives_counts():
    project = SimpleNamespace(start_date=None, end_date=None, budget_allocated=1000, budget_spent=500)

    def task(**kw):
        base = dict(status="pending", priority="medium", assigned_to=None, risks=None, issues=None, start_date=None, end_date=None)
        base.update(kw)
        return SimpleNamespace(**base)

    tasks = [
        task(status="completed", risks="weather", issues="late delivery", start_date=date(2025, 1, 1)),
        task(assigned_to="Crew A", risks="soil", priority="urgent", issues="permit", end_date=date(2025, 6, 30)),
        task(risks="price", priority="low"),
        task(status="cancelled", risks="ignored", issues="ignored"),
    ]
    d = inputs_from_project(project, tasks, today=date(2025, 3, 1))
    assert (d.start_date, d.end_date) == (date(2025, 1, 1), date(2025, 6, 30))
    assert (d.total_tasks, d.completed_tasks) == (3, 1)
    assert (d.assigned_resources, d.required_resources) == (1, 2)
    assert (d.high_risks, d.medium_risks, d.low_risks) == (1, 0, 1)
    assert (d.open_issues, d.critical_issues, d.resolved_issues) == (1, 1, 1)


# ---------- API ----------
def test_health_calculate_endpoint(admin_client):
    r = admin_client.post(
        "/api/v1/health/calculate",
        json={"startDate": "2025-01-01", "endDate": "2025-12-31", "currentDate": "2024-12-01", "budgetAllocated": 100, "budgetSpent": 80},
    )
    assert r.status_code == 200
    assert r.json["health"]["overallScore"] == 100


def test_health_calculate_validation(admin_client):
    r = admin_client.post("/api/v1/health/calculate", json={"startDate": "nope"})
    assert r.status_code == 400


def test_project_health_endpoint(admin_client):
    pid = admin_client.post(
        "/api/v1/projects", json={"name": "Coastal", "budgetAllocated": 1000, "budgetSpent": 100}
    ).json["project"]["id"]
    r = admin_client.get(f"/api/v1/health/{pid}")
    assert r.status_code == 200
    assert r.json["projectId"] == pid
    assert set(r.json["health"]["factors"]) == {
        "timelineHealth", "budgetHealth", "resourceHealth", "riskHealth", "progressHealth", "issueHealth",
    }
    assert admin_client.get("/api/v1/health/9999").status_code == 404


def test_dashboard_summary(admin_client, app):
    today = date.today()
    pid = admin_client.post(
        "/api/v1/projects",
        json={"name": "School", "status": "active", "budgetAllocated": 1000, "budgetSpent": 950},
    ).json["project"]["id"]
    admin_client.post("/api/v1/projects", json={"name": "Road", "budgetAllocated": 1000, "budgetSpent": 100})
    sid = admin_client.post(
        "/api/v1/schedules",
        json={"projectId": pid, "name": "Main", "startDate": "2025-01-01", "endDate": "2030-12-31"},
    ).json["schedule"]["id"]
    admin_client.post(f"/api/v1/schedules/{sid}/tasks", json={"name": "Soon", "dueDate": (today + timedelta(days=3)).isoformat()})
    admin_client.post(f"/api/v1/schedules/{sid}/tasks", json={"name": "Late", "dueDate": (today - timedelta(days=3)).isoformat()})
    admin_client.post(f"/api/v1/schedules/{sid}/tasks", json={"name": "Done", "status": "completed"})

    r = admin_client.get("/api/v1/dashboard/summary")
    assert r.status_code == 200
    summary = r.json["summary"]
    assert summary["projects"]["total"] == 2
    assert summary["projects"]["active"] == 1
    assert summary["budget"]["allocated"] == 2000
    assert summary["budget"]["overBudget"] == 1
    assert summary["budget"]["onTrack"] == 1
    assert summary["tasks"]["total"] == 3
    assert summary["tasks"]["overdue"] == 1
    assert summary["tasks"]["completionPercentage"] == 33.3
    assert [t["name"] for t in summary["upcomingDeadlines"]] == ["Soon"]
    assert summary["recentActivity"]


def test_dashboard_summary_scoped_to_user(client):
    login(client, "admin")
    client.post("/api/v1/projects", json={"name": "Admin only"})
    login(client, "alice")
    summary = client.get("/api/v1/dashboard/summary").json["summary"]
    assert summary["projects"]["total"] == 0
    assert all(ev["username"] == "alice" for ev in summary["recentActivity"])
