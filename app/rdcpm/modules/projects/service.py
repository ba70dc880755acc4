from __future__ import annotations

import csv
import io
import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, or_

from app.rdcpm.audit import record_event
from app.rdcpm.constants import PRIORITIES, PROJECT_CODE_PREFIX, PROJECT_STATUSES
from app.rdcpm.errors import ConflictError, ValidationError
from app.rdcpm.notifications import budget_ratio, crossed_threshold
from app.rdcpm.rbac import user_has_permission
from app.rdcpm.utils import clean_str, parse_date, parse_number

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from app.rdcpm.models import User
    from app.rdcpm.modules.projects.models import Project

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(rf"^{PROJECT_CODE_PREFIX}-(\d+)$")

# JSON key -> model attribute for plain string fields.
_STRING_FIELDS = {
    "name": "name",
    "description": "description",
    "category": "category",
    "region": "region",
}

CSV_COLUMNS = [
    "code",
    "name",
    "status",
    "priority",
    "category",
    "region",
    "budget_allocated",
    "budget_spent",
    "currency",
    "start_date",
    "end_date",
]


def validate_project_payload(payload: dict, *, partial: bool = False) -> list[str]:
    """Validate project create/update payload. Returns list of errors."""
    errors: list[str] = []
    if not partial or "name" in payload:
        name = payload.get("name")
        if name is not None and not isinstance(name, str):
            errors.append("Project name must be text.")
        elif not (name or "").strip():
            errors.append("Project name is required.")
    for key in ("description", "category", "region", "reason"):
        if payload.get(key) is not None and not isinstance(payload.get(key), str):
            errors.append(f"{key} must be text.")

    status = payload.get("status")
    if status is not None and status not in PROJECT_STATUSES:
        errors.append(f"Invalid status. Must be one of: {', '.join(PROJECT_STATUSES)}")
    priority = payload.get("priority")
    if priority is not None and priority not in PRIORITIES:
        errors.append(f"Invalid priority. Must be one of: {', '.join(PRIORITIES)}")

    for key, label in (("budgetAllocated", "Budget allocated"), ("budgetSpent", "Budget spent")):
        if key not in payload:
            continue
        try:
            value = parse_number(payload.get(key))
        except (TypeError, ValueError):
            errors.append(f"{label} must be a number.")
            continue
        if value is not None and value < 0:
            errors.append(f"{label} cannot be negative.")

    dates = {}
    for key, label in (("startDate", "Start date"), ("endDate", "End date")):
        try:
            dates[key] = parse_date(payload.get(key))
        except (TypeError, ValueError):
            errors.append(f"{label} must be a date (YYYY-MM-DD).")
    if dates.get("startDate") and dates.get("endDate") and dates["endDate"] < dates["startDate"]:
        errors.append("End date must be on or after the start date.")

    currency = payload.get("currency")
    if currency is not None and (not isinstance(currency, str) or len(currency.strip()) != 3):
        errors.append("Currency must be a 3-letter code.")

    code = payload.get("code")
    if code is not None and code != "" and not _CODE_RE.match(str(code).strip()):
        errors.append(f"Project code must look like {PROJECT_CODE_PREFIX}-001.")

    manager = payload.get("projectManagerId")
    if manager not in (None, "") and _user_id(manager) is None:
        errors.append("projectManagerId must be a user id.")
    return errors


def _user_id(raw) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def resolve_project_manager(s: "Session", raw) -> int | None:
    """Id of an active user for projectManagerId, or None when unset. Unknown users are a 400."""
    from app.rdcpm.models import User

    if raw in (None, ""):
        return None
    user_id = _user_id(raw)
    manager = s.get(User, user_id) if user_id is not None else None
    if manager is None or not manager.is_active:
        raise ValidationError(["Project manager not found."])
    return manager.id


def next_project_code(s: "Session") -> str:
    from app.rdcpm.modules.projects.models import Project

    highest = 0
    for (code,) in s.query(Project.code).filter(Project.code.like(f"{PROJECT_CODE_PREFIX}-%")).all():
        m = _CODE_RE.match(code or "")
        if m:
            highest = max(highest, int(m.group(1)))
    return f"{PROJECT_CODE_PREFIX}-{highest + 1:03d}"


def visible_projects_query(s: "Session", user: "User") -> "Query":
    from app.rdcpm.modules.projects.models import Project

    q = s.query(Project)
    if not user_has_permission(user, "projects.view_all"):
        q = q.filter(or_(Project.owner_user_id == user.id, Project.project_manager_id == user.id))
    return q


def get_visible_project(s: "Session", user: "User", project_id: int) -> "Project | None":
    from app.rdcpm.modules.projects.models import Project

    return visible_projects_query(s, user).filter(Project.id == project_id).one_or_none()


def filter_projects(q: "Query", *, status: str | None = None, priority: str | None = None, search: str | None = None) -> "Query":
    from app.rdcpm.modules.projects.models import Project

    if status:
        q = q.filter(Project.status == status)
    if priority:
        q = q.filter(Project.priority == priority)
    if search:
        like = f"%{search}%"
        q = q.filter(
            (Project.name.ilike(like))
            | (Project.code.ilike(like))
            | (Project.description.ilike(like))
        )
    return q


def project_counts_by_status(q: "Query") -> dict[str, int]:
    from app.rdcpm.modules.projects.models import Project

    rows = q.with_entities(Project.status, func.count(Project.id)).group_by(Project.status).all()
    counts = {st: 0 for st in PROJECT_STATUSES}
    counts.update({st: int(n) for st, n in rows})
    return counts


def create_project(s: "Session", payload: dict, user: "User") -> "Project":
    """Create new project. Payload must already be validated."""
    from app.rdcpm.modules.projects.models import Project

    code = clean_str(payload.get("code")) or next_project_code(s)
    if s.query(Project.id).filter(Project.code == code).first():
        raise ConflictError(f"Project code {code} already exists.")

    now = datetime.utcnow()
    project = Project(
        code=code,
        name=(payload.get("name") or "").strip(),
        description=clean_str(payload.get("description")),
        category=clean_str(payload.get("category")),
        status=payload.get("status") or "planning",
        priority=payload.get("priority") or "medium",
        budget_allocated=parse_number(payload.get("budgetAllocated")),
        budget_spent=parse_number(payload.get("budgetSpent")) or 0,
        currency=(clean_str(payload.get("currency")) or "USD").upper(),
        start_date=parse_date(payload.get("startDate")),
        end_date=parse_date(payload.get("endDate")),
        region=clean_str(payload.get("region")),
        owner_user_id=user.id,
        project_manager_id=resolve_project_manager(s, payload.get("projectManagerId")) or user.id,
        created_at=now,
        updated_at=now,
    )
    s.add(project)
    s.flush()

    record_event(
        s,
        actor=user,
        action="project.create",
        entity_type="Project",
        entity_id=str(project.id),
        metadata={"code": project.code, "name": project.name, "status": project.status},
    )
    return project


def update_project(
    s: "Session",
    project: "Project",
    payload: dict,
    user: "User",
    reason: str | None = None,
    threshold: float | None = None,
) -> float | None:
    """
    Partial update. Only keys present in the payload are touched.
    Returns the new budget ratio when the update moves spend across the alert
    threshold, else None. The caller sends the alert once the update is committed.
    """
    changes: dict[str, dict] = {}
    old_ratio = budget_ratio(project.budget_allocated, project.budget_spent)

    for key, attr in _STRING_FIELDS.items():
        if key not in payload:
            continue
        new = clean_str(payload.get(key))
        if attr == "name" and not new:
            continue
        if new != getattr(project, attr):
            changes[attr] = {"old": getattr(project, attr), "new": new}
            setattr(project, attr, new)

    for key in ("status", "priority"):
        new = payload.get(key)
        if new and new != getattr(project, key):
            changes[key] = {"old": getattr(project, key), "new": new}
            setattr(project, key, new)

    for key, attr in (("budgetAllocated", "budget_allocated"), ("budgetSpent", "budget_spent")):
        if key not in payload:
            continue
        new = parse_number(payload.get(key))
        if attr == "budget_spent" and new is None:
            new = 0.0
        old = getattr(project, attr)
        if (float(old) if old is not None else None) != new:
            changes[attr] = {"old": old, "new": new}
            setattr(project, attr, new)

    for key, attr in (("startDate", "start_date"), ("endDate", "end_date")):
        if key not in payload:
            continue
        new = parse_date(payload.get(key))
        if new != getattr(project, attr):
            changes[attr] = {"old": str(getattr(project, attr)), "new": str(new)}
            setattr(project, attr, new)

    if project.start_date and project.end_date and project.end_date < project.start_date:
        raise ValidationError(["End date must be on or after the start date."])

    if "currency" in payload and payload.get("currency"):
        new = payload["currency"].strip().upper()
        if new != project.currency:
            changes["currency"] = {"old": project.currency, "new": new}
            project.currency = new

    if "projectManagerId" in payload:
        new = resolve_project_manager(s, payload.get("projectManagerId"))
        if new != project.project_manager_id:
            changes["project_manager_id"] = {"old": project.project_manager_id, "new": new}
            project.project_manager_id = new

    if not changes:
        return None

    project.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="project.status_change" if set(changes) == {"status"} else "project.update",
        entity_type="Project",
        entity_id=str(project.id),
        reason=reason,
        metadata={"changes": changes},
    )

    if threshold is not None and ("budget_spent" in changes or "budget_allocated" in changes):
        new_ratio = budget_ratio(project.budget_allocated, project.budget_spent)
        if crossed_threshold(old_ratio, new_ratio, threshold):
            logger.info("Project %s crossed budget threshold (%.2f)", project.code, new_ratio)
            return new_ratio
    return None


def delete_project(s: "Session", project: "Project", user: "User", reason: str | None = None) -> None:
    """Delete a project together with its schedules and tasks."""
    from app.rdcpm.modules.schedules.models import Schedule, Task
    from app.rdcpm.modules.schedules.service import purge_tasks

    schedule_ids = [sid for (sid,) in s.query(Schedule.id).filter(Schedule.project_id == project.id).all()]
    task_count = 0
    if schedule_ids:
        task_count = s.query(Task).filter(Task.schedule_id.in_(schedule_ids)).count()
    record_event(
        s,
        actor=user,
        action="project.delete",
        entity_type="Project",
        entity_id=str(project.id),
        reason=reason,
        metadata={"code": project.code, "name": project.name, "schedules": len(schedule_ids), "tasks": task_count},
    )
    purge_tasks(s, schedule_ids)
    for schedule in project.schedules:
        s.expire(schedule, ["tasks"])
    s.delete(project)


def export_projects_csv(projects: list["Project"]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(CSV_COLUMNS)
    for p in projects:
        w.writerow(
            [
                p.code,
                p.name,
                p.status,
                p.priority,
                p.category or "",
                p.region or "",
                "" if p.budget_allocated is None else f"{float(p.budget_allocated):.2f}",
                f"{float(p.budget_spent or 0):.2f}",
                p.currency,
                p.start_date.isoformat() if p.start_date else "",
                p.end_date.isoformat() if p.end_date else "",
            ]
        )
    return buf.getvalue()
