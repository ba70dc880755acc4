"""
Rule-based project analysis.

`analyze_project` scores the description against keyword lists to pick a
project type, adjusts that type's template tasks, groups them into phases and
summarises complexity, risk, critical path and staffing. Everything here is
pure; the API layer owns persistence and auditing.
"""
from __future__ import annotations

import copy
import math
import re
import time
from datetime import date
from typing import TYPE_CHECKING, Any

from app.rdcpm.modules.task_breakdown.templates import DEFAULT_TEMPLATE, TEMPLATES

if TYPE_CHECKING:
    from app.rdcpm.modules.projects.models import Project
    from app.rdcpm.modules.schedules.models import Schedule, Task

# Order matters: on equal non-zero scores the later type wins.
PROJECT_TYPES = (
    "construction_project",
    "mobile_app",
    "web_application",
    "backend_service",
    "data_project",
    "design_project",
    "e_commerce",
    "game_development",
    "iot_project",
    "ai_ml_project",
)

# (keywords, {project_type: points})
TYPE_RULES: list[tuple[tuple[str, ...], dict[str, int]]] = [
    (("mobile app", "app development", "ios", "android", "react native", "flutter"), {"mobile_app": 3}),
    (("restaurant", "ordering", "delivery", "food"), {"mobile_app": 2}),
    (("web", "website", "react", "vue", "angular", "frontend"), {"web_application": 3}),
    (("e-commerce", "shopping", "store", "payment"), {"e_commerce": 2, "web_application": 1}),
    (("api", "backend", "microservice", "server"), {"backend_service": 3}),
    (("database", "data", "analytics", "reporting", "dashboard", "visualization"), {"data_project": 3}),
    (("ai", "machine learning", "ml", "artificial intelligence", "neural", "model"), {"ai_ml_project": 3}),
    (("design", "ui/ux", "wireframe", "prototype"), {"design_project": 3}),
    (("game", "gaming", "unity", "unreal"), {"game_development": 3}),
    (("iot", "internet of things", "sensor", "embedded"), {"iot_project": 3}),
    (
        (
            "construction", "building", "school", "dartmouth", "infrastructure", "civil",
            "architectural", "contractor", "foundation", "structural", "permits", "site",
            "excavation", "mep",
        ),
        {"construction_project": 4},
    ),
]

HIGH_RISK_CATEGORIES = ("Development", "Security", "Payment", "MLOps")
COMPLEX_PROJECT_TYPES = ("ai_ml_project", "e_commerce", "game_development")
COMPLEX_CATEGORIES = ("ML Development", "Payment Integration", "Security")

CONSTRUCTION_PHASES = [
    ("planning-phase", "📋 Planning & Design Phase", "Initial planning, surveys, permits, and design work",
     ("planning", "design", "survey", "permit")),
    ("procurement-phase", "📦 Procurement Phase", "Material procurement and vendor selection",
     ("procurement", "vendor", "material")),
    ("construction-phase", "🏗️ Construction Phase", "Main construction activities and building work",
     ("construction", "building", "foundation", "structural", "mep", "interior", "exterior")),
    ("completion-phase", "✅ Completion Phase", "Final testing, inspection, and project handover",
     ("testing", "commissioning", "inspection", "handover", "completion")),
]
CONSTRUCTION_DEFAULT_PHASE = "construction-phase"

DEFAULT_PHASES = [
    ("planning-phase", "📋 Planning Phase", "Requirements analysis and project planning",
     ("planning", "requirements", "design")),
    ("development-phase", "💻 Development Phase", "Main development and implementation work",
     ("development", "implementation", "coding")),
    ("testing-phase", "🧪 Testing Phase", "Testing, QA, and quality assurance",
     ("testing", "qa", "quality")),
    ("deployment-phase", "🚀 Deployment Phase", "Deployment and project handover",
     ("deployment", "launch", "handover")),
]
DEFAULT_PHASE = "development-phase"


def _has_keyword(text: str, keyword: str) -> bool:
    # Whole words only, so "website" does not count as "site".
    return re.search(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?![a-z0-9])", text) is not None


def score_project_types(description: str) -> dict[str, int]:
    text = description.lower()
    scores = {t: 0 for t in PROJECT_TYPES}
    for keywords, points in TYPE_RULES:
        if any(_has_keyword(text, kw) for kw in keywords):
            for project_type, n in points.items():
                scores[project_type] += n
    return scores


def detect_project_type(description: str, hint: str | None = None) -> str:
    """
    Highest-scoring type for the description. With no keyword hits at all the
    caller's hint is used when it names a known type.
    """
    scores = score_project_types(description)
    if not any(scores.values()):
        if hint in PROJECT_TYPES:
            return hint
        return DEFAULT_TEMPLATE
    best = PROJECT_TYPES[0]
    for project_type in PROJECT_TYPES[1:]:
        if scores[project_type] >= scores[best]:
            best = project_type
    return best


def base_tasks_for(project_type: str) -> list[dict[str, Any]]:
    return copy.deepcopy(TEMPLATES.get(project_type) or TEMPLATES[DEFAULT_TEMPLATE])


def adjust_risk(task: dict) -> int:
    risk = task["riskLevel"]
    if task["complexity"] == "high":
        risk += 15
    elif task["complexity"] == "low":
        risk -= 10
    if task.get("category") in HIGH_RISK_CATEGORIES:
        risk += 10
    deps = task.get("dependencies") or []
    if len(deps) > 2:
        risk += len(deps) * 5
    return max(0, min(100, risk))


def adjust_estimate(task: dict) -> float:
    """Scales the base estimate by complexity and base risk, rounded up to the next half day."""
    days = float(task["estimatedDays"])
    if task["complexity"] == "high":
        days *= 1.4
    elif task["complexity"] == "low":
        days *= 0.7
    if task["riskLevel"] > 70:
        days *= 1.5
    elif task["riskLevel"] < 30:
        days *= 0.9
    rounded = math.ceil(round(days * 2, 6)) / 2
    return int(rounded) if rounded.is_integer() else rounded


def adjust_complexity(task: dict, project_type: str) -> str:
    score = {"high": 3, "medium": 2}.get(task["complexity"], 1)
    if project_type in COMPLEX_PROJECT_TYPES:
        score += 1
    if task.get("category") in COMPLEX_CATEGORIES:
        score += 1
    if len(task.get("dependencies") or []) > 3:
        score += 1
    if score >= 4:
        return "high"
    if score >= 2:
        return "medium"
    return "low"


def customize_tasks(base: list[dict], project_type: str, *, stamp: int | None = None) -> list[dict]:
    """
    Adjusted copies of the template tasks. Ids get a per-analysis suffix and
    dependencies are rewritten to match.
    """
    if stamp is None:
        stamp = int(time.time() * 1000)
    suffix = f"_{stamp}"
    out = []
    for task in base:
        adjusted = dict(task)
        adjusted["id"] = task["id"] + suffix
        adjusted["dependencies"] = [dep + suffix for dep in task.get("dependencies") or []]
        # All three adjustments read the template's base values.
        adjusted["riskLevel"] = adjust_risk(task)
        adjusted["estimatedDays"] = adjust_estimate(task)
        adjusted["complexity"] = adjust_complexity(task, project_type)
        out.append(adjusted)
    return out


def organize_phases(tasks: list[dict], project_type: str) -> list[dict]:
    if project_type == "construction_project":
        layout, fallback = CONSTRUCTION_PHASES, CONSTRUCTION_DEFAULT_PHASE
    else:
        layout, fallback = DEFAULT_PHASES, DEFAULT_PHASE

    phases = {
        pid: {"id": pid, "name": name, "description": desc, "estimatedDays": 0, "tasks": []}
        for pid, name, desc, _ in layout
    }
    for task in tasks:
        category = (task.get("category") or "").lower()
        target = fallback
        for pid, _name, _desc, words in layout:
            if any(w in category for w in words):
                target = pid
                break
        phases[target]["tasks"].append(task)
        phases[target]["estimatedDays"] += task["estimatedDays"]
    return [phases[pid] for pid, *_ in layout if phases[pid]["tasks"]]


def project_complexity(tasks: list[dict]) -> str:
    if not tasks:
        return "low"
    share = sum(1 for t in tasks if t["complexity"] == "high") / len(tasks)
    if share > 0.6:
        return "high"
    if share > 0.3:
        return "medium"
    return "low"


def project_risk(tasks: list[dict]) -> int:
    if not tasks:
        return 0
    mean = sum(t["riskLevel"] for t in tasks) / len(tasks)
    return int(math.floor(mean + 0.5))


def critical_path(tasks: list[dict]) -> list[str]:
    return [t["id"] for t in tasks if t.get("priority") in ("high", "urgent")]


def resource_requirements(tasks: list[dict]) -> dict[str, int]:
    req = {"developers": 0, "designers": 0, "testers": 0, "managers": 0}
    for t in tasks:
        skills = t.get("skills") or []
        days = t["estimatedDays"]

        def _any(*needles: str) -> bool:
            return any(n in skill for skill in skills for n in needles)

        if _any("Development", "Programming"):
            req["developers"] += math.ceil(days / 5)
        if _any("Design", "UI/UX"):
            req["designers"] += math.ceil(days / 3)
        if _any("Testing", "QA"):
            req["testers"] += math.ceil(days / 4)
        if _any("Management", "Analysis"):
            req["managers"] += math.ceil(days / 7)
    return req


def estimated_duration(tasks: list[dict]) -> float:
    total = sum(t["estimatedDays"] for t in tasks)
    return int(total) if float(total).is_integer() else total


def analyze_project(description: str, project_type: str | None = None, *, stamp: int | None = None) -> dict:
    detected = detect_project_type(description, project_type)
    tasks = customize_tasks(base_tasks_for(detected), detected, stamp=stamp)
    return {
        "projectType": detected,
        "complexity": project_complexity(tasks),
        "estimatedDuration": estimated_duration(tasks),
        "riskLevel": project_risk(tasks),
        "suggestedPhases": organize_phases(tasks, detected),
        "taskSuggestions": tasks,
        "criticalPath": critical_path(tasks),
        "resourceRequirements": resource_requirements(tasks),
    }


def generate_insights(analysis: dict) -> dict[str, list[str]]:
    insights: dict[str, list[str]] = {"recommendations": [], "warnings": [], "optimizations": []}
    tasks = analysis.get("taskSuggestions") or []
    resources = analysis.get("resourceRequirements") or {}

    if analysis.get("complexity") == "high":
        insights["recommendations"].append("Consider breaking this project into smaller phases to reduce complexity")
        insights["recommendations"].append("Allocate experienced team members to high-complexity tasks")

    if analysis.get("riskLevel", 0) > 60:
        insights["warnings"].append("High risk level detected - consider adding buffer time and contingency plans")
        insights["recommendations"].append("Implement regular risk assessment checkpoints")

    if resources.get("developers", 0) > 5:
        insights["recommendations"].append("Large development team required - ensure proper coordination and communication")

    if resources.get("designers", 0) == 0 and "app" in (analysis.get("projectType") or ""):
        insights["warnings"].append("No designers allocated for app project - consider adding UI/UX design resources")

    if analysis.get("estimatedDuration", 0) > 60:
        insights["optimizations"].append("Long project duration - consider parallel task execution where possible")
        insights["recommendations"].append("Break project into smaller milestones for better tracking")

    high_risk = [t for t in tasks if t.get("riskLevel", 0) > 50]
    if high_risk:
        insights["warnings"].append(f"{len(high_risk)} high-risk tasks identified - monitor closely")

    high_complexity = [t for t in tasks if t.get("complexity") == "high"]
    if len(high_complexity) > len(tasks) * 0.6:
        insights["recommendations"].append("Most tasks are high complexity - consider additional planning and review cycles")

    return insights


def suggest_dependencies(tasks: list[dict]) -> list[dict]:
    """Keyword-based finish-to-start links: planning -> design -> development -> testing."""

    def _matches(task: dict, categories: tuple[str, ...], names: tuple[str, ...]) -> bool:
        category = str(task.get("category") or "").lower()
        name = str(task.get("name") or "").lower()
        return any(c in category for c in categories) or any(n in name for n in names)

    planning = [t for t in tasks if _matches(t, ("planning",), ("requirements",))]
    design = [t for t in tasks if _matches(t, ("design",), ("design", "ui"))]
    development = [t for t in tasks if _matches(t, ("development",), ("development", "coding"))]
    testing = [t for t in tasks if _matches(t, ("testing",), ("testing", "qa"))]

    links = [
        (planning, design, 0.9, "Design tasks typically depend on completed requirements and planning"),
        (design, development, 0.8, "Development tasks typically require completed designs"),
        (development, testing, 0.95, "Testing tasks require completed development work"),
    ]
    deps = []
    for sources, targets, confidence, reason in links:
        for a in sources:
            for b in targets:
                if a.get("id") == b.get("id"):
                    continue
                deps.append(
                    {
                        "fromTask": a.get("id"),
                        "toTask": b.get("id"),
                        "type": "finish-to-start",
                        "confidence": confidence,
                        "reason": reason,
                    }
                )
    return deps


def optimize_schedule(schedule: "Schedule", tasks: list["Task"], today: date | None = None) -> dict:
    """
    Suggestions for open tasks only: urgent or high-priority work with no
    assignee, tasks past their due date, and tasks with no dates at all.
    """
    today = today or date.today()
    suggestions = []
    for t in tasks:
        if t.status in ("completed", "cancelled"):
            continue
        reasons = []
        start, end = t.start_date, t.end_date or t.due_date
        if not t.assigned_to and t.priority in ("high", "urgent"):
            reasons.append(f"{t.priority.capitalize()} priority task has no assignee")
        if end and end < today:
            reasons.append(f"Task is overdue (due {end.isoformat()}); reschedule the remaining work")
            span = (end - start).days if start else 0
            start = today
            end = date.fromordinal(today.toordinal() + max(span, 0))
        if t.start_date is None and t.end_date is None and t.due_date is None:
            reasons.append("Task has no dates; place it within the schedule window")
            start, end = schedule.start_date, schedule.end_date
        if not reasons:
            continue
        suggestions.append(
            {
                "id": t.id,
                "suggestedStartDate": start.isoformat() if start else None,
                "suggestedEndDate": end.isoformat() if end else None,
                "suggestedAssignee": t.assigned_to,
                "optimizationReason": "; ".join(reasons),
            }
        )
    return {
        "tasks": suggestions,
        "improvements": {"durationReduction": 0, "riskReduction": 0, "resourceUtilization": 0},
    }


def project_insights(project: "Project", tasks: list["Task"], today: date | None = None) -> dict:
    """Metrics and risk indicators computed from the project's own records."""
    today = today or date.today()
    live = [t for t in tasks if t.status != "cancelled"]
    completed = [t for t in live if t.status == "completed"]
    overdue = [t for t in live if t.status != "completed" and (t.end_date or t.due_date) and (t.end_date or t.due_date) < today]
    unassigned = [t for t in live if t.status != "completed" and not t.assigned_to]
    with_risks = [t for t in live if t.risks and t.status != "completed"]
    with_issues = [t for t in live if t.issues and t.status != "completed"]

    completion = round(len(completed) / len(live) * 100, 1) if live else 0.0
    utilization = project.budget_utilization

    indicators = []
    recommendations = []
    if utilization is not None and utilization >= 100:
        indicators.append(f"Budget overrun: {utilization}% of allocation spent")
        recommendations.append("Review spending and re-forecast the remaining budget")
    elif utilization is not None and utilization >= 90:
        indicators.append(f"Budget nearly exhausted: {utilization}% of allocation spent")
        recommendations.append("Review spending before approving new work")
    if overdue:
        indicators.append(f"{len(overdue)} overdue tasks")
        recommendations.append("Re-plan overdue tasks and update their dependencies")
    if unassigned:
        indicators.append(f"{len(unassigned)} open tasks without an assignee")
        recommendations.append("Assign owners to all open tasks")
    if with_risks:
        indicators.append(f"{len(with_risks)} open tasks with recorded risks")
    if with_issues:
        indicators.append(f"{len(with_issues)} open tasks with recorded issues")
        recommendations.append("Resolve open issues before they block dependent work")
    if project.end_date and project.end_date < today and project.status not in ("completed", "cancelled"):
        indicators.append("Project end date has passed")
        recommendations.append("Agree a revised end date with stakeholders")

    return {
        "performanceMetrics": {
            "totalTasks": len(live),
            "completedTasks": len(completed),
            "completionPercentage": completion,
            "overdueTasks": len(overdue),
            "budgetUtilization": utilization,
        },
        "riskIndicators": indicators,
        "recommendations": recommendations,
        "trends": {
            "inProgressTasks": sum(1 for t in live if t.status == "in_progress"),
            "pendingTasks": sum(1 for t in live if t.status == "pending"),
        },
    }


def learning_insights(feedback: list[dict]) -> dict:
    accepted = sum(len(f.get("acceptedTasks") or []) for f in feedback)
    rejected = sum(len(f.get("rejectedTasks") or []) for f in feedback)
    modified = sum(len(f.get("modifiedTasks") or []) for f in feedback)
    reviewed = accepted + rejected
    return {
        "totalFeedbackItems": len(feedback),
        "acceptedTasks": accepted,
        "rejectedTasks": rejected,
        "modifiedTasks": modified,
        "acceptanceRate": round(accepted / reviewed * 100, 1) if reviewed else None,
        "accuracyTrend": _trend(feedback),
    }


def _trend(feedback: list[dict]) -> str:
    # Compares acceptance in the older and newer halves of the feedback list (oldest first).
    if len(feedback) < 4:
        return "stable"

    def _rate(items: list[dict]) -> float:
        acc = sum(len(f.get("acceptedTasks") or []) for f in items)
        rej = sum(len(f.get("rejectedTasks") or []) for f in items)
        return acc / (acc + rej) if acc + rej else 0.0

    half = len(feedback) // 2
    delta = _rate(feedback[half:]) - _rate(feedback[:half])
    if delta > 0.05:
        return "improving"
    if delta < -0.05:
        return "declining"
    return "stable"
