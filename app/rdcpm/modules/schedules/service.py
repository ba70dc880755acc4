from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.rdcpm.audit import record_event
from app.rdcpm.constants import PRIORITIES, SCHEDULE_STATUSES, TASK_STATUSES
from app.rdcpm.errors import ValidationError
from app.rdcpm.utils import clean_str, parse_date, parse_number

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.rdcpm.models import User
    from app.rdcpm.modules.projects.models import Project
    from app.rdcpm.modules.schedules.models import Schedule, Task


# JSON key -> Task attribute
_TASK_TEXT_FIELDS = {
    "description": "description",
    "assignedTo": "assigned_to",
    "workEffort": "work_effort",
    "dependency": "dependency",
    "risks": "risks",
    "issues": "issues",
    "comments": "comments",
}
_TASK_DATE_FIELDS = {"dueDate": "due_date", "startDate": "start_date", "endDate": "end_date"}
_TASK_NUMBER_FIELDS = {
    "estimatedDays": "estimated_days",
    "estimatedDurationHours": "estimated_duration_hours",
    "actualDurationHours": "actual_duration_hours",
}


def _date_errors(payload: dict, fields: dict[str, str]) -> tuple[list[str], dict]:
    errors: list[str] = []
    parsed = {}
    for key in fields:
        if key not in payload:
            continue
        try:
            parsed[key] = parse_date(payload.get(key))
        except (TypeError, ValueError):
            errors.append(f"{key} must be a date (YYYY-MM-DD).")
    return errors, parsed


# ---------- Schedules ----------
def validate_schedule_payload(payload: dict, *, partial: bool = False) -> list[str]:
    """Validate schedule create/update payload. Returns list of errors."""
    errors: list[str] = []
    if not partial or "name" in payload:
        name = payload.get("name")
        if name is not None and not isinstance(name, str):
            errors.append("Schedule name must be text.")
        elif not (name or "").strip():
            errors.append("Schedule name is required.")
    if not partial:
        if payload.get("projectId") in (None, ""):
            errors.append("projectId is required.")
        for key in ("startDate", "endDate"):
            if not payload.get(key):
                errors.append(f"{key} is required.")

    status = payload.get("status")
    if status is not None and status not in SCHEDULE_STATUSES:
        errors.append(f"Invalid status. Must be one of: {', '.join(SCHEDULE_STATUSES)}")

    date_errors, dates = _date_errors(payload, {"startDate": "start_date", "endDate": "end_date"})
    errors.extend(date_errors)
    if dates.get("startDate") and dates.get("endDate") and dates["endDate"] < dates["startDate"]:
        errors.append("End date must be on or after the start date.")
    return errors


def create_schedule(s: "Session", project: "Project", payload: dict, user: "User") -> "Schedule":
    from app.rdcpm.modules.schedules.models import Schedule

    now = datetime.utcnow()
    schedule = Schedule(
        project_id=project.id,
        name=payload["name"].strip(),
        description=clean_str(payload.get("description")),
        start_date=parse_date(payload.get("startDate")),
        end_date=parse_date(payload.get("endDate")),
        status=payload.get("status") or "active",
        created_by_user_id=user.id,
        created_at=now,
        updated_at=now,
    )
    s.add(schedule)
    s.flush()
    record_event(
        s,
        actor=user,
        action="schedule.create",
        entity_type="Schedule",
        entity_id=str(schedule.id),
        metadata={"project_id": project.id, "name": schedule.name},
    )
    return schedule


def update_schedule(s: "Session", schedule: "Schedule", payload: dict, user: "User") -> "Schedule":
    changes: dict[str, dict] = {}

    if "name" in payload:
        new = clean_str(payload.get("name"))
        if new and new != schedule.name:
            changes["name"] = {"old": schedule.name, "new": new}
            schedule.name = new
    if "description" in payload:
        new = clean_str(payload.get("description"))
        if new != schedule.description:
            changes["description"] = {"old": schedule.description, "new": new}
            schedule.description = new
    if payload.get("status") and payload["status"] != schedule.status:
        changes["status"] = {"old": schedule.status, "new": payload["status"]}
        schedule.status = payload["status"]
    for key, attr in (("startDate", "start_date"), ("endDate", "end_date")):
        if key not in payload:
            continue
        new = parse_date(payload.get(key))
        if new is None:
            continue
        if new != getattr(schedule, attr):
            changes[attr] = {"old": str(getattr(schedule, attr)), "new": str(new)}
            setattr(schedule, attr, new)

    if schedule.end_date < schedule.start_date:
        raise ValidationError(["End date must be on or after the start date."])

    if changes:
        schedule.updated_at = datetime.utcnow()
        record_event(
            s,
            actor=user,
            action="schedule.update",
            entity_type="Schedule",
            entity_id=str(schedule.id),
            metadata={"changes": changes},
        )
    return schedule


def purge_tasks(s: "Session", schedule_ids: list[int]) -> int:
    """Bulk-delete every task of the given schedules. Returns the number deleted."""
    from app.rdcpm.modules.schedules.models import Task

    if not schedule_ids:
        return 0
    q = s.query(Task).filter(Task.schedule_id.in_(schedule_ids))
    q.update({Task.parent_task_id: None}, synchronize_session=False)
    return q.delete(synchronize_session=False)


def delete_schedule(s: "Session", schedule: "Schedule", user: "User") -> None:
    """Delete a schedule and all of its tasks."""
    removed = purge_tasks(s, [schedule.id])
    s.expire(schedule, ["tasks"])
    record_event(
        s,
        actor=user,
        action="schedule.delete",
        entity_type="Schedule",
        entity_id=str(schedule.id),
        metadata={"project_id": schedule.project_id, "name": schedule.name, "tasks": removed},
    )
    s.delete(schedule)


# ---------- Tasks ----------
def validate_task_payload(payload: dict, *, partial: bool = False) -> list[str]:
    """Validate task create/update payload. Returns list of errors."""
    errors: list[str] = []
    if not partial or "name" in payload:
        name = payload.get("name")
        if name is not None and not isinstance(name, str):
            errors.append("Task name must be text.")
        elif not (name or "").strip():
            errors.append("Task name is required.")

    status = payload.get("status")
    if status is not None and status not in TASK_STATUSES:
        errors.append(f"Invalid status. Must be one of: {', '.join(TASK_STATUSES)}")
    priority = payload.get("priority")
    if priority is not None and priority not in PRIORITIES:
        errors.append(f"Invalid priority. Must be one of: {', '.join(PRIORITIES)}")

    for key in _TASK_NUMBER_FIELDS:
        if key not in payload:
            continue
        try:
            value = parse_number(payload.get(key))
        except (TypeError, ValueError):
            errors.append(f"{key} must be a number.")
            continue
        if value is not None and value <= 0:
            errors.append(f"{key} must be positive.")

    if "progressPercentage" in payload and payload.get("progressPercentage") is not None:
        try:
            progress = parse_number(payload.get("progressPercentage"))
        except (TypeError, ValueError):
            progress = None
            errors.append("progressPercentage must be a number.")
        if progress is not None and not (0 <= progress <= 100):
            errors.append("progressPercentage must be between 0 and 100.")

    date_errors, dates = _date_errors(payload, _TASK_DATE_FIELDS)
    errors.extend(date_errors)
    if dates.get("startDate") and dates.get("endDate") and dates["endDate"] < dates["startDate"]:
        errors.append("End date must be on or after the start date.")

    parent = payload.get("parentTaskId")
    if parent not in (None, "") and not isinstance(parent, int):
        try:
            int(parent)
        except (TypeError, ValueError):
            errors.append("parentTaskId must be a task id.")
    return errors


def _check_parent(s: "Session", schedule_id: int, task_id: int | None, parent_id: int | None) -> None:
    """Parent must live in the same schedule and must not be the task itself or one of its descendants."""
    from app.rdcpm.modules.schedules.models import Task

    if parent_id is None:
        return
    parent = s.get(Task, parent_id)
    if parent is None or parent.schedule_id != schedule_id:
        raise ValidationError(["Parent task must belong to the same schedule."])
    if task_id is None:
        return
    seen: set[int] = set()
    node: Task | None = parent
    while node is not None:
        if node.id == task_id:
            raise ValidationError(["Parent task would create a cycle."])
        if node.id in seen:
            break
        seen.add(node.id)
        node = s.get(Task, node.parent_task_id) if node.parent_task_id else None


def _parent_id(payload: dict) -> int | None:
    raw = payload.get("parentTaskId")
    if raw in (None, ""):
        return None
    return int(raw)


def _apply_progress_rules(task: "Task") -> None:
    if task.status == "completed":
        task.progress_percentage = 100


def create_task(s: "Session", schedule: "Schedule", payload: dict, user: "User") -> "Task":
    from app.rdcpm.modules.schedules.models import Task

    parent_id = _parent_id(payload)
    _check_parent(s, schedule.id, None, parent_id)

    now = datetime.utcnow()
    task = Task(
        schedule_id=schedule.id,
        parent_task_id=parent_id,
        name=payload["name"].strip(),
        status=payload.get("status") or "pending",
        priority=payload.get("priority") or "medium",
        progress_percentage=int(parse_number(payload.get("progressPercentage")) or 0),
        created_by_user_id=user.id,
        created_at=now,
        updated_at=now,
    )
    for key, attr in _TASK_TEXT_FIELDS.items():
        setattr(task, attr, clean_str(payload.get(key)))
    for key, attr in _TASK_DATE_FIELDS.items():
        setattr(task, attr, parse_date(payload.get(key)))
    for key, attr in _TASK_NUMBER_FIELDS.items():
        setattr(task, attr, parse_number(payload.get(key)))
    _apply_progress_rules(task)

    s.add(task)
    s.flush()
    record_event(
        s,
        actor=user,
        action="task.create",
        entity_type="Task",
        entity_id=str(task.id),
        metadata={"schedule_id": schedule.id, "name": task.name, "parent_task_id": parent_id},
    )
    return task


def update_task(s: "Session", task: "Task", payload: dict, user: "User") -> "Task":
    changes: dict[str, dict] = {}

    if "name" in payload:
        new = clean_str(payload.get("name"))
        if new and new != task.name:
            changes["name"] = {"old": task.name, "new": new}
            task.name = new
    for key in ("status", "priority"):
        new = payload.get(key)
        if new and new != getattr(task, key):
            changes[key] = {"old": getattr(task, key), "new": new}
            setattr(task, key, new)
    for key, attr in _TASK_TEXT_FIELDS.items():
        if key in payload:
            new = clean_str(payload.get(key))
            if new != getattr(task, attr):
                changes[attr] = {"old": getattr(task, attr), "new": new}
                setattr(task, attr, new)
    for key, attr in _TASK_DATE_FIELDS.items():
        if key in payload:
            new = parse_date(payload.get(key))
            if new != getattr(task, attr):
                changes[attr] = {"old": str(getattr(task, attr)), "new": str(new)}
                setattr(task, attr, new)
    for key, attr in _TASK_NUMBER_FIELDS.items():
        if key in payload:
            new = parse_number(payload.get(key))
            if new != getattr(task, attr):
                changes[attr] = {"old": getattr(task, attr), "new": new}
                setattr(task, attr, new)
    if "progressPercentage" in payload and payload.get("progressPercentage") is not None:
        new = int(parse_number(payload.get("progressPercentage")))
        if new != task.progress_percentage:
            changes["progress_percentage"] = {"old": task.progress_percentage, "new": new}
            task.progress_percentage = new
    if "parentTaskId" in payload:
        new = _parent_id(payload)
        if new != task.parent_task_id:
            _check_parent(s, task.schedule_id, task.id, new)
            changes["parent_task_id"] = {"old": task.parent_task_id, "new": new}
            task.parent_task_id = new

    if task.start_date and task.end_date and task.end_date < task.start_date:
        raise ValidationError(["End date must be on or after the start date."])

    before = task.progress_percentage
    _apply_progress_rules(task)
    if task.progress_percentage != before:
        changes["progress_percentage"] = {"old": before, "new": task.progress_percentage}

    if changes:
        task.updated_at = datetime.utcnow()
        record_event(
            s,
            actor=user,
            action="task.update",
            entity_type="Task",
            entity_id=str(task.id),
            metadata={"changes": changes},
        )
    return task


def delete_task(s: "Session", task: "Task", user: "User") -> int:
    """Delete a task; its direct subtasks move up to the deleted task's parent. Returns re-parented count."""
    from app.rdcpm.modules.schedules.models import Task

    children = s.query(Task).filter(Task.parent_task_id == task.id).all()
    for child in children:
        child.parent_task_id = task.parent_task_id
    s.flush()
    record_event(
        s,
        actor=user,
        action="task.delete",
        entity_type="Task",
        entity_id=str(task.id),
        metadata={"schedule_id": task.schedule_id, "name": task.name, "reparented": [c.id for c in children]},
    )
    s.delete(task)
    return len(children)


def build_task_tree(tasks: list["Task"]) -> list[dict]:
    """Nest tasks under their parents. Orphans (parent outside the list) are treated as roots."""
    nodes = {t.id: {**t.to_dict(), "subtasks": []} for t in tasks}
    roots: list[dict] = []
    for t in tasks:
        node = nodes[t.id]
        if t.parent_task_id and t.parent_task_id in nodes:
            nodes[t.parent_task_id]["subtasks"].append(node)
        else:
            roots.append(node)
    return roots


def sort_tasks(tasks: list["Task"]) -> list["Task"]:
    """Order by start date (undated last), then id."""
    return sorted(tasks, key=lambda t: (t.start_date is None, t.start_date or datetime.min.date(), t.id))
