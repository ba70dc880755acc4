"""
Project health score.

Six factors, each 0-100, combined with fixed weights:
timeline .25, budget .20, resources .15, risk .20, progress .10, issues .10.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.rdcpm.modules.projects.models import Project
    from app.rdcpm.modules.schedules.models import Task


WEIGHTS = {
    "timeline": 0.25,
    "budget": 0.20,
    "resource": 0.15,
    "risk": 0.20,
    "progress": 0.10,
    "issue": 0.10,
}

# (min score, status, color), highest first.
_BANDS = (
    (90, "excellent", "green"),
    (80, "good", "yellow"),
    (70, "fair", "orange"),
    (60, "poor", "red"),
)


@dataclass
class HealthInputs:
    start_date: date | None
    end_date: date | None
    current_date: date = field(default_factory=date.today)
    budget_allocated: float = 0.0
    budget_spent: float = 0.0
    assigned_resources: int = 0
    required_resources: int = 0
    high_risks: int = 0
    medium_risks: int = 0
    low_risks: int = 0
    completed_tasks: int = 0
    total_tasks: int = 0
    open_issues: int = 0
    critical_issues: int = 0
    resolved_issues: int = 0


@dataclass
class HealthFactors:
    timelineHealth: float
    budgetHealth: float
    resourceHealth: float
    riskHealth: float
    progressHealth: float
    issueHealth: float


def timeline_health(d: HealthInputs) -> float:
    if not d.start_date or not d.end_date:
        return 100.0
    total_days = (d.end_date - d.start_date).days
    days_elapsed = (d.current_date - d.start_date).days
    days_remaining = (d.end_date - d.current_date).days

    # not started yet
    if days_elapsed <= 0:
        return 100.0
    # overdue
    if days_remaining < 0:
        return float(max(0, 50 + days_remaining * 2))

    expected = (days_elapsed / total_days) * 100 if total_days > 0 else 100.0
    actual = (d.completed_tasks / d.total_tasks) * 100 if d.total_tasks else 0.0
    alignment = 100 - abs(expected - actual)
    if actual > expected:
        return min(100.0, alignment + 10)
    return max(0.0, alignment)


def budget_health(d: HealthInputs) -> float:
    if not d.budget_allocated:
        return 100.0
    utilization = (d.budget_spent / d.budget_allocated) * 100
    if 70 <= utilization <= 90:
        return 100.0
    if utilization < 70:
        return max(60.0, 100 - (70 - utilization) * 2)
    return max(0.0, 100 - (utilization - 90) * 3)


def resource_health(d: HealthInputs) -> float:
    if not d.required_resources:
        return 100.0
    utilization = (d.assigned_resources / d.required_resources) * 100
    if 90 <= utilization <= 110:
        return 100.0
    if utilization < 90:
        return max(0.0, utilization)
    return max(60.0, 100 - (utilization - 110) * 2)


def risk_health(d: HealthInputs) -> float:
    score = d.high_risks * 10 + d.medium_risks * 5 + d.low_risks * 2
    return float(max(0, 100 - score))


def progress_health(d: HealthInputs) -> float:
    if not d.total_tasks:
        return 100.0
    return (d.completed_tasks / d.total_tasks) * 100


def issue_health(d: HealthInputs) -> float:
    if d.open_issues + d.resolved_issues == 0:
        return 100.0
    penalty = d.open_issues * 5 + d.critical_issues * 15
    return float(max(0, 100 - penalty))


def calculate_factors(d: HealthInputs) -> HealthFactors:
    return HealthFactors(
        timelineHealth=timeline_health(d),
        budgetHealth=budget_health(d),
        resourceHealth=resource_health(d),
        riskHealth=risk_health(d),
        progressHealth=progress_health(d),
        issueHealth=issue_health(d),
    )


def overall_score(f: HealthFactors) -> float:
    return (
        f.timelineHealth * WEIGHTS["timeline"]
        + f.budgetHealth * WEIGHTS["budget"]
        + f.resourceHealth * WEIGHTS["resource"]
        + f.riskHealth * WEIGHTS["risk"]
        + f.progressHealth * WEIGHTS["progress"]
        + f.issueHealth * WEIGHTS["issue"]
    )


def status_and_color(score: float) -> tuple[str, str]:
    for floor, status, color in _BANDS:
        if score >= floor:
            return status, color
    return "critical", "dark-red"


def recommendations(f: HealthFactors, score: float) -> list[str]:
    out: list[str] = []
    if f.timelineHealth < 70:
        out.append("Review project timeline and identify bottlenecks")
        out.append("Consider adding resources to critical path tasks")
    if f.budgetHealth < 70:
        if f.budgetHealth < 50:
            out.append("Budget overrun detected - review expenses immediately")
        else:
            out.append("Monitor budget closely - approaching limits")
    if f.resourceHealth < 70:
        out.append("Resource allocation needs attention")
        if f.resourceHealth < 50:
            out.append("Consider hiring additional team members")
    if f.riskHealth < 70:
        out.append("High number of risks identified - develop mitigation strategies")
        out.append("Schedule regular risk review meetings")
    if f.progressHealth < 70:
        out.append("Project progress is behind schedule")
        out.append("Review task assignments and dependencies")
    if f.issueHealth < 70:
        out.append("Multiple issues require immediate attention")
        out.append("Implement issue tracking and resolution process")

    if score < 60:
        out.append("Project health is critical - escalate to senior management")
        out.append("Consider project restart or major scope reduction")
    elif score < 70:
        out.append("Project needs immediate intervention")
        out.append("Schedule emergency project review meeting")
    return out


def calculate_health_score(d: HealthInputs) -> dict:
    factors = calculate_factors(d)
    score = overall_score(factors)
    status, color = status_and_color(score)
    return {
        "overallScore": int(math.floor(score + 0.5)),
        "healthStatus": status,
        "healthColor": color,
        "factors": {k: round(v, 2) for k, v in asdict(factors).items()},
        "recommendations": recommendations(factors, score),
        "lastUpdated": datetime.utcnow().isoformat() + "Z",
    }


def inputs_from_project(project: "Project", tasks: list["Task"], today: date | None = None) -> HealthInputs:
    """
    Derive health inputs from stored data.

    Cancelled tasks are ignored. Every open task needs one assignee; tasks with
    risk notes count as risks graded by priority; tasks with issue notes count as
    open issues until completed, critical when urgent.
    """
    live = [t for t in tasks if t.status != "cancelled"]
    open_tasks = [t for t in live if t.status != "completed"]

    start = project.start_date
    end = project.end_date
    if start is None or end is None:
        dated_starts = [t.start_date for t in live if t.start_date]
        dated_ends = [t.end_date for t in live if t.end_date]
        start = start or (min(dated_starts) if dated_starts else None)
        end = end or (max(dated_ends) if dated_ends else None)

    d = HealthInputs(
        start_date=start,
        end_date=end,
        current_date=today or date.today(),
        budget_allocated=float(project.budget_allocated or 0),
        budget_spent=float(project.budget_spent or 0),
        assigned_resources=sum(1 for t in open_tasks if (t.assigned_to or "").strip()),
        required_resources=len(open_tasks),
        completed_tasks=sum(1 for t in live if t.status == "completed"),
        total_tasks=len(live),
    )
    for t in open_tasks:
        if not (t.risks or "").strip():
            continue
        if t.priority in ("high", "urgent"):
            d.high_risks += 1
        elif t.priority == "medium":
            d.medium_risks += 1
        else:
            d.low_risks += 1
    for t in live:
        if not (t.issues or "").strip():
            continue
        if t.status == "completed":
            d.resolved_issues += 1
        else:
            d.open_issues += 1
            if t.priority == "urgent":
                d.critical_issues += 1
    return d


def inputs_from_payload(payload: dict) -> HealthInputs:
    """Build inputs from an explicit camelCase payload. Raises ValueError on bad values."""
    from app.rdcpm.utils import parse_date

    def _num(key: str) -> float:
        raw = payload.get(key, 0)
        if isinstance(raw, bool):
            raise ValueError(f"{key} must be a number")
        value = float(raw or 0)
        if value < 0:
            raise ValueError(f"{key} cannot be negative")
        return value

    start = parse_date(payload.get("startDate"))
    end = parse_date(payload.get("endDate"))
    if not start or not end:
        raise ValueError("startDate and endDate are required")
    return HealthInputs(
        start_date=start,
        end_date=end,
        current_date=parse_date(payload.get("currentDate")) or date.today(),
        budget_allocated=_num("budgetAllocated"),
        budget_spent=_num("budgetSpent"),
        assigned_resources=int(_num("assignedResources")),
        required_resources=int(_num("requiredResources")),
        high_risks=int(_num("highRisks")),
        medium_risks=int(_num("mediumRisks")),
        low_risks=int(_num("lowRisks")),
        completed_tasks=int(_num("completedTasks")),
        total_tasks=int(_num("totalTasks")),
        open_issues=int(_num("openIssues")),
        critical_issues=int(_num("criticalIssues")),
        resolved_issues=int(_num("resolvedIssues")),
    )
