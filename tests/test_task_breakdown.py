from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from conftest import login

from app.rdcpm.modules.task_breakdown.analyzer import (
    adjust_complexity,
    adjust_estimate,
    adjust_risk,
    analyze_project,
    customize_tasks,
    detect_project_type,
    generate_insights,
    learning_insights,
    optimize_schedule,
    organize_phases,
    suggest_dependencies,
)
from app.rdcpm.modules.task_breakdown.templates import TEMPLATES

DARTMOUTH = "Construct a new primary school building in Dartmouth, including permits and site works"


# ---------- project type ----------
def test_detects_construction_project():
    assert detect_project_type(DARTMOUTH) == "construction_project"


def test_website_does_not_count_as_site():
    assert detect_project_type("A marketing website with a React frontend") == "web_application"


def test_hint_used_only_without_keyword_hits():
    assert detect_project_type("Quarterly plan for the garden club", "backend_service") == "backend_service"
    assert detect_project_type("Quarterly plan for the garden club", "unknown") == "mobile_app"
    assert detect_project_type("Quarterly plan for the garden club") == "mobile_app"
    assert detect_project_type("A reporting dashboard", "backend_service") == "data_project"


def test_later_type_wins_ties():
    # backend_service and data_project both score 3
    assert detect_project_type("data api") == "data_project"


# ---------- task adjustments ----------
@pytest.mark.parametrize(
    "task,expected",
    [
        ({"estimatedDays": 5, "complexity": "high", "riskLevel": 25}, 6.5),
        ({"estimatedDays": 10, "complexity": "medium", "riskLevel": 50}, 10),
        ({"estimatedDays": 4, "complexity": "low", "riskLevel": 80}, 4.5),
    ],
)
def test_adjust_estimate_rounds_up_to_half_day(task, expected):
    assert adjust_estimate(task) == expected


def test_adjust_risk():
    assert adjust_risk({"riskLevel": 25, "complexity": "high", "category": "Planning"}) == 40
    assert adjust_risk({"riskLevel": 5, "complexity": "low", "category": "Security"}) == 5
    assert adjust_risk({"riskLevel": 95, "complexity": "high", "category": "Payment", "dependencies": ["a", "b", "c"]}) == 100
    assert adjust_risk({"riskLevel": 5, "complexity": "low"}) == 0


def test_adjust_complexity():
    assert adjust_complexity({"complexity": "medium", "category": "Payment Integration"}, "e_commerce") == "high"
    assert adjust_complexity({"complexity": "low", "category": "Design"}, "mobile_app") == "low"
    assert adjust_complexity({"complexity": "low", "category": "Design"}, "ai_ml_project") == "medium"


def test_customize_tasks_suffixes_ids_and_dependencies():
    tasks = customize_tasks(TEMPLATES["construction_project"], "construction_project", stamp=1700)
    ids = {t["id"] for t in tasks}
    assert "site_survey_1700" in ids
    for t in tasks:
        assert set(t["dependencies"]) <= ids
    permits = next(t for t in tasks if t["id"] == "permits_approvals_1700")
    assert permits["dependencies"] == ["site_survey_1700"]
    # template is left untouched
    assert TEMPLATES["construction_project"][0]["id"] == "site_survey"


def test_construction_phases():
    tasks = customize_tasks(TEMPLATES["construction_project"], "construction_project", stamp=1)
    phases = organize_phases(tasks, "construction_project")
    assert [p["id"] for p in phases] == ["planning-phase", "procurement-phase", "construction-phase", "completion-phase"]
    assert sum(len(p["tasks"]) for p in phases) == len(tasks)
    for p in phases:
        assert p["estimatedDays"] == sum(t["estimatedDays"] for t in p["tasks"])
    planning = [t["id"] for t in phases[0]["tasks"]]
    assert planning[:3] == ["site_survey_1", "permits_approvals_1", "architectural_design_1"]


def test_analyze_project_shape():
    a = analyze_project(DARTMOUTH, stamp=5)
    assert a["projectType"] == "construction_project"
    assert len(a["taskSuggestions"]) == len(TEMPLATES["construction_project"])
    assert a["estimatedDuration"] == sum(t["estimatedDays"] for t in a["taskSuggestions"])
    assert a["criticalPath"] == [t["id"] for t in a["taskSuggestions"] if t["priority"] in ("high", "urgent")]
    assert 0 <= a["riskLevel"] <= 100
    assert set(a["resourceRequirements"]) == {"developers", "designers", "testers", "managers"}


def test_generate_insights_rules():
    analysis = {
        "projectType": "mobile_app",
        "complexity": "high",
        "riskLevel": 70,
        "estimatedDuration": 90,
        "resourceRequirements": {"developers": 6, "designers": 0},
        "taskSuggestions": [{"riskLevel": 60, "complexity": "high"}],
    }
    insights = generate_insights(analysis)
    assert insights["recommendations"] == [
        "Consider breaking this project into smaller phases to reduce complexity",
        "Allocate experienced team members to high-complexity tasks",
        "Implement regular risk assessment checkpoints",
        "Large development team required - ensure proper coordination and communication",
        "Break project into smaller milestones for better tracking",
        "Most tasks are high complexity - consider additional planning and review cycles",
    ]
    assert insights["warnings"] == [
        "High risk level detected - consider adding buffer time and contingency plans",
        "No designers allocated for app project - consider adding UI/UX design resources",
        "1 high-risk tasks identified - monitor closely",
    ]
    assert insights["optimizations"] == ["Long project duration - consider parallel task execution where possible"]


def test_generate_insights_quiet_project():
    analysis = {"projectType": "backend_service", "complexity": "low", "riskLevel": 20, "estimatedDuration": 10,
                "resourceRequirements": {"developers": 1}, "taskSuggestions": [{"riskLevel": 20, "complexity": "low"}]}
    assert generate_insights(analysis) == {"recommendations": [], "warnings": [], "optimizations": []}


# ---------- dependencies ----------
def test_suggest_dependencies_chain():
    tasks = [
        {"id": "a", "name": "Scope workshop", "category": "Planning"},
        {"id": "b", "name": "Wireframes", "category": "Design"},
        {"id": "c", "name": "Implement features", "category": "Development"},
        {"id": "d", "name": "Acceptance run", "category": "Testing"},
    ]
    deps = suggest_dependencies(tasks)
    assert [(d["fromTask"], d["toTask"], d["confidence"]) for d in deps] == [("a", "b", 0.9), ("b", "c", 0.8), ("c", "d", 0.95)]
    assert all(d["type"] == "finish-to-start" for d in deps)


def test_suggest_dependencies_skips_self_links():
    deps = suggest_dependencies([{"id": "x", "name": "Design and development", "category": "Design"}])
    assert deps == []


# ---------- schedule optimisation ----------
def _task(id, **kw):
    base = dict(id=id, status="pending", priority="medium", assigned_to="Crew", start_date=None, end_date=None, due_date=None)
    base.update(kw)
    return SimpleNamespace(**base)


def test_optimize_schedule_rules():
    schedule = SimpleNamespace(start_date=date(2025, 1, 1), end_date=date(2025, 12, 31))
    tasks = [
        _task(1, priority="high", assigned_to=None, start_date=date(2025, 7, 1), end_date=date(2025, 7, 10)),
        _task(2, start_date=date(2025, 5, 1), end_date=date(2025, 5, 11)),
        _task(3, priority="low"),
        _task(4, status="completed", priority="high", assigned_to=None),
        _task(5, start_date=date(2025, 8, 1), end_date=date(2025, 8, 5)),
    ]
    result = optimize_schedule(schedule, tasks, today=date(2025, 6, 1))
    by_id = {t["id"]: t for t in result["tasks"]}
    assert set(by_id) == {1, 2, 3}
    assert by_id[1]["optimizationReason"] == "High priority task has no assignee"
    assert (by_id[1]["suggestedStartDate"], by_id[1]["suggestedEndDate"]) == ("2025-07-01", "2025-07-10")
    assert (by_id[2]["suggestedStartDate"], by_id[2]["suggestedEndDate"]) == ("2025-06-01", "2025-06-11")
    assert by_id[2]["optimizationReason"].startswith("Task is overdue (due 2025-05-11)")
    assert (by_id[3]["suggestedStartDate"], by_id[3]["suggestedEndDate"]) == ("2025-01-01", "2025-12-31")
    assert result["improvements"] == {"durationReduction": 0, "riskReduction": 0, "resourceUtilization": 0}


# ---------- learning ----------
def test_learning_insights_empty():
    assert learning_insights([]) == {
        "totalFeedbackItems": 0,
        "acceptedTasks": 0,
        "rejectedTasks": 0,
        "modifiedTasks": 0,
        "acceptanceRate": None,
        "accuracyTrend": "stable",
    }


def test_learning_insights_declining_trend():
    good = {"acceptedTasks": ["a", "b"], "rejectedTasks": []}
    bad = {"acceptedTasks": [], "rejectedTasks": ["a", "b"]}
    assert learning_insights([good, good, bad, bad])["accuracyTrend"] == "declining"
    assert learning_insights([good, bad, good])["accuracyTrend"] == "stable"


# ---------- API ----------
def test_analyze_endpoint(admin_client):
    r = admin_client.post("/api/v1/ai-scheduling/analyze-project", json={"projectDescription": DARTMOUTH})
    assert r.status_code == 200
    assert r.json["aiPowered"] is False
    assert r.json["analysis"]["projectType"] == "construction_project"
    assert set(r.json["insights"]) == {"recommendations", "warnings", "optimizations"}


def test_analyze_endpoint_validation(admin_client):
    r = admin_client.post("/api/v1/ai-scheduling/analyze-project", json={"projectDescription": "short"})
    assert r.status_code == 400
    assert r.json["errors"] == ["projectDescription must be at least 10 characters."]


def test_analyze_requires_auth(client):
    r = client.post("/api/v1/ai-scheduling/analyze-project", json={"projectDescription": DARTMOUTH})
    assert r.status_code == 401


def test_suggest_dependencies_endpoint(admin_client):
    r = admin_client.post(
        "/api/v1/ai-scheduling/suggest-dependencies",
        json={"tasks": [{"id": "a", "name": "Scope", "category": "Planning"}, {"id": "b", "name": "Wireframes", "category": "Design"}]},
    )
    assert r.status_code == 200
    assert [(d["fromTask"], d["toTask"]) for d in r.json["dependencies"]] == [("a", "b")]
    assert admin_client.post("/api/v1/ai-scheduling/suggest-dependencies", json={"tasks": [{"name": "x"}]}).status_code == 400


def test_optimize_schedule_endpoint(client):
    login(client, "alice")
    today = date.today()
    pid = client.post("/api/v1/projects", json={"name": "Dartmouth School"}).json["project"]["id"]
    sid = client.post(
        "/api/v1/schedules",
        json={"projectId": pid, "name": "Main", "startDate": today.isoformat(), "endDate": (today + timedelta(days=90)).isoformat()},
    ).json["schedule"]["id"]
    tid = client.post(
        f"/api/v1/schedules/{sid}/tasks",
        json={"name": "Permits", "priority": "urgent", "startDate": today.isoformat(), "endDate": (today + timedelta(days=5)).isoformat()},
    ).json["task"]["id"]

    r = client.post("/api/v1/ai-scheduling/optimize-schedule", json={"scheduleId": sid})
    assert r.status_code == 200
    [suggestion] = r.json["optimizedSchedule"]["tasks"]
    assert suggestion["id"] == tid
    assert suggestion["optimizationReason"] == "Urgent priority task has no assignee"

    assert client.post("/api/v1/ai-scheduling/optimize-schedule", json={}).status_code == 400
    login(client, "bob")
    assert client.post("/api/v1/ai-scheduling/optimize-schedule", json={"scheduleId": sid}).status_code == 404


def test_project_insights_endpoint(admin_client):
    pid = admin_client.post(
        "/api/v1/projects", json={"name": "Coastal", "budgetAllocated": 1000, "budgetSpent": 950}
    ).json["project"]["id"]
    sid = admin_client.post(
        "/api/v1/schedules", json={"projectId": pid, "name": "Main", "startDate": "2025-01-01", "endDate": "2030-12-31"}
    ).json["schedule"]["id"]
    admin_client.post(f"/api/v1/schedules/{sid}/tasks", json={"name": "Sea wall", "issues": "Supplier delay"})
    admin_client.post(f"/api/v1/schedules/{sid}/tasks", json={"name": "Survey", "status": "completed", "assignedTo": "Crew"})

    r = admin_client.get(f"/api/v1/ai-scheduling/insights/{pid}")
    assert r.status_code == 200
    insights = r.json["insights"]
    assert insights["performanceMetrics"]["completionPercentage"] == 50.0
    assert "Budget nearly exhausted: 95.0% of allocation spent" in insights["riskIndicators"]
    assert "1 open tasks without an assignee" in insights["riskIndicators"]
    assert "Resolve open issues before they block dependent work" in insights["recommendations"]
    assert admin_client.get("/api/v1/ai-scheduling/insights/999").status_code == 404


def _feedback(accepted, rejected, modified=()):
    return {
        "projectType": "construction_project",
        "projectDescription": DARTMOUTH,
        "generatedTasks": [{"id": "a"}, {"id": "b"}],
        "userFeedback": {"acceptedTasks": list(accepted), "rejectedTasks": list(rejected), "modifiedTasks": list(modified)},
    }


def test_feedback_feeds_learning_insights(admin_client):
    payloads = [
        _feedback(["a"], ["b"]),
        _feedback(["a"], ["b"], [{"id": "a", "estimatedDays": 7}]),
        _feedback(["a", "b"], []),
        _feedback(["a", "b"], []),
    ]
    for p in payloads:
        r = admin_client.post("/api/v1/ai-scheduling/feedback", json=p)
        assert r.status_code == 200
        assert r.json["message"] == "Feedback recorded successfully"

    insights = admin_client.get("/api/v1/ai-scheduling/learning-insights").json["insights"]
    assert insights["totalFeedbackItems"] == 4
    assert (insights["acceptedTasks"], insights["rejectedTasks"], insights["modifiedTasks"]) == (6, 2, 1)
    assert insights["acceptanceRate"] == 75.0
    assert insights["accuracyTrend"] == "improving"


def test_feedback_validation(admin_client):
    r = admin_client.post("/api/v1/ai-scheduling/feedback", json={"projectType": "mobile_app"})
    assert r.status_code == 400
    assert "userFeedback is required." in r.json["errors"]
