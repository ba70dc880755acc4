from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from app.rdcpm.audit import event_to_dict
from app.rdcpm.constants import TASK_STATUSES
from app.rdcpm.rbac import user_has_permission

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.rdcpm.models import User

UPCOMING_WINDOW_DAYS = 14
UPCOMING_LIMIT = 10
RECENT_ACTIVITY_LIMIT = 10


def _task_deadline(t) -> date | None:
    return t.due_date or t.end_date


def build_summary(s: "Session", user: "User", *, threshold: float, today: date | None = None) -> dict:
    from app.rdcpm.models import AuditEvent
    from app.rdcpm.modules.projects.service import project_counts_by_status, visible_projects_query
    from app.rdcpm.modules.schedules.models import Schedule, Task

    today = today or date.today()
    projects = visible_projects_query(s, user).all()
    project_ids = [p.id for p in projects]
    by_id = {p.id: p for p in projects}
    counts = project_counts_by_status(visible_projects_query(s, user))

    allocated = sum(float(p.budget_allocated or 0) for p in projects)
    spent = sum(float(p.budget_spent or 0) for p in projects)
    over_budget = [
        p for p in projects if p.budget_allocated and float(p.budget_spent or 0) / float(p.budget_allocated) >= threshold
    ]

    rows: list[tuple] = []
    if project_ids:
        rows = (
            s.query(Task, Schedule.project_id)
            .join(Schedule, Schedule.id == Task.schedule_id)
            .filter(Schedule.project_id.in_(project_ids))
            .all()
        )
    tasks = [t for t, _ in rows]
    task_project = {t.id: pid for t, pid in rows}

    task_counts = {st: 0 for st in TASK_STATUSES}
    for t in tasks:
        task_counts[t.status] = task_counts.get(t.status, 0) + 1
    countable = len(tasks) - task_counts.get("cancelled", 0)
    completion = round(task_counts.get("completed", 0) / countable * 100, 1) if countable else 0.0

    open_tasks = [t for t in tasks if t.status not in ("completed", "cancelled")]
    horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)
    upcoming = sorted(
        (t for t in open_tasks if _task_deadline(t) and today <= _task_deadline(t) <= horizon),
        key=lambda t: (_task_deadline(t), t.id),
    )[:UPCOMING_LIMIT]
    overdue = sum(1 for t in open_tasks if _task_deadline(t) and _task_deadline(t) < today)

    aq = s.query(AuditEvent)
    if not user_has_permission(user, "audit.view"):
        aq = aq.filter(AuditEvent.actor_user_id == user.id)
    recent = aq.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(RECENT_ACTIVITY_LIMIT).all()

    return {
        "projects": {
            "total": len(projects),
            "active": counts.get("active", 0),
            "planning": counts.get("planning", 0),
            "completed": counts.get("completed", 0),
            "byStatus": counts,
        },
        "budget": {
            "allocated": round(allocated, 2),
            "spent": round(spent, 2),
            "remaining": round(allocated - spent, 2),
            "utilization": round(spent / allocated * 100, 1) if allocated else 0.0,
            "alertThreshold": round(threshold * 100, 1),
            "overBudget": len(over_budget),
            "onTrack": sum(1 for p in projects if p.budget_allocated) - len(over_budget),
            "overBudgetProjects": [{"id": p.id, "code": p.code, "name": p.name} for p in over_budget],
        },
        "tasks": {
            "total": len(tasks),
            "byStatus": task_counts,
            "completionPercentage": completion,
            "overdue": overdue,
        },
        "upcomingDeadlines": [
            {
                "taskId": t.id,
                "name": t.name,
                "dueDate": _task_deadline(t).isoformat(),
                "status": t.status,
                "priority": t.priority,
                "projectId": task_project[t.id],
                "projectName": by_id[task_project[t.id]].name,
            }
            for t in upcoming
        ],
        "recentActivity": [event_to_dict(ev) for ev in recent],
    }
