from __future__ import annotations

from flask import Blueprint, abort, g, jsonify

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.models import User
from app.rdcpm.modules.projects.service import get_visible_project
from app.rdcpm.modules.schedules.models import Schedule, Task
from app.rdcpm.modules.schedules.service import (
    build_task_tree,
    create_schedule,
    create_task,
    delete_schedule,
    delete_task,
    sort_tasks,
    update_schedule,
    update_task,
    validate_schedule_payload,
    validate_task_payload,
)
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import json_body

bp = Blueprint("schedules", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _visible_schedule(s, schedule_id: int) -> Schedule:
    """Schedule whose project the current user can see, else 404."""
    schedule = s.get(Schedule, schedule_id)
    if not schedule or not get_visible_project(s, _current_user(), schedule.project_id):
        abort(404, description="Schedule not found")
    return schedule


def _schedule_task(s, schedule: Schedule, task_id: int) -> Task:
    task = s.get(Task, task_id)
    if not task or task.schedule_id != schedule.id:
        abort(404, description="Task not found")
    return task


# ---------- Schedules ----------
@bp.get("/project/<int:project_id>")
@require_permission("schedules.view")
def schedules_for_project(project_id: int):
    s = db_session()
    project = get_visible_project(s, _current_user(), project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")
    schedules = (
        s.query(Schedule)
        .filter(Schedule.project_id == project.id)
        .order_by(Schedule.start_date.asc(), Schedule.id.asc())
        .all()
    )
    return jsonify({"schedules": [sch.to_dict() for sch in schedules]})


@bp.post("/", strict_slashes=False)
@require_permission("schedules.edit")
def schedule_create():
    payload = json_body()
    errors = validate_schedule_payload(payload)
    if errors:
        raise ValidationError(errors)

    s = db_session()
    user = _current_user()
    try:
        project_id = int(payload["projectId"])
    except (TypeError, ValueError):
        raise ValidationError(["projectId must be a project id."])
    project = get_visible_project(s, user, project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")

    schedule = create_schedule(s, project, payload, user)
    s.commit()
    return jsonify({"schedule": schedule.to_dict()}), 201


@bp.put("/<int:schedule_id>")
@require_permission("schedules.edit")
def schedule_update(schedule_id: int):
    s = db_session()
    schedule = _visible_schedule(s, schedule_id)
    payload = json_body()
    errors = validate_schedule_payload(payload, partial=True)
    if errors:
        raise ValidationError(errors)
    update_schedule(s, schedule, payload, _current_user())
    s.commit()
    return jsonify({"schedule": schedule.to_dict()})


@bp.delete("/<int:schedule_id>")
@require_permission("schedules.edit")
def schedule_delete(schedule_id: int):
    s = db_session()
    schedule = _visible_schedule(s, schedule_id)
    delete_schedule(s, schedule, _current_user())
    s.commit()
    return jsonify({"message": "Schedule deleted successfully"})


# ---------- Tasks ----------
@bp.get("/<int:schedule_id>/tasks")
@require_permission("schedules.view")
def tasks_list(schedule_id: int):
    s = db_session()
    schedule = _visible_schedule(s, schedule_id)
    tasks = sort_tasks(s.query(Task).filter(Task.schedule_id == schedule.id).all())
    return jsonify({"tasks": [t.to_dict() for t in tasks], "tree": build_task_tree(tasks)})


@bp.post("/<int:schedule_id>/tasks")
@require_permission("schedules.edit")
def task_create(schedule_id: int):
    s = db_session()
    schedule = _visible_schedule(s, schedule_id)
    payload = json_body()
    errors = validate_task_payload(payload)
    if errors:
        raise ValidationError(errors)
    task = create_task(s, schedule, payload, _current_user())
    s.commit()
    return jsonify({"task": task.to_dict()}), 201


@bp.put("/<int:schedule_id>/tasks/<int:task_id>")
@require_permission("schedules.edit")
def task_update(schedule_id: int, task_id: int):
    s = db_session()
    schedule = _visible_schedule(s, schedule_id)
    task = _schedule_task(s, schedule, task_id)
    payload = json_body()
    errors = validate_task_payload(payload, partial=True)
    if errors:
        raise ValidationError(errors)
    update_task(s, task, payload, _current_user())
    s.commit()
    return jsonify({"task": task.to_dict()})


@bp.delete("/<int:schedule_id>/tasks/<int:task_id>")
@require_permission("schedules.edit")
def task_delete(schedule_id: int, task_id: int):
    s = db_session()
    schedule = _visible_schedule(s, schedule_id)
    task = _schedule_task(s, schedule, task_id)
    reparented = delete_task(s, task, _current_user())
    s.commit()
    return jsonify({"message": "Task deleted successfully", "reparented": reparented})
