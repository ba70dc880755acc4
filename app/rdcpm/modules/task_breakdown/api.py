from __future__ import annotations

from flask import Blueprint, abort, current_app, g, jsonify

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.modules.projects.service import get_visible_project
from app.rdcpm.modules.schedules.models import Schedule, Task
from app.rdcpm.modules.task_breakdown.analyzer import (
    analyze_project,
    generate_insights,
    learning_insights,
    optimize_schedule,
    project_insights,
    suggest_dependencies,
)
from app.rdcpm.modules.task_breakdown.service import (
    load_feedback,
    record_feedback,
    validate_analyze_payload,
    validate_dependencies_payload,
    validate_feedback_payload,
    validate_optimize_payload,
)
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import json_body

bp = Blueprint("ai_scheduling", __name__)


@bp.post("/analyze-project")
@require_permission("assistant.use")
def analyze():
    payload = json_body()
    errors = validate_analyze_payload(payload)
    if errors:
        raise ValidationError(errors)

    description = payload["projectDescription"].strip()
    current_app.logger.info(
        "Task breakdown request: projectType=%s descriptionLength=%s existingTasks=%s",
        payload.get("projectType"),
        len(description),
        len(payload.get("existingTasks") or []),
    )
    analysis = analyze_project(description, payload.get("projectType"))
    return jsonify({"analysis": analysis, "insights": generate_insights(analysis), "aiPowered": False})


@bp.post("/suggest-dependencies")
@require_permission("assistant.use")
def dependencies():
    payload = json_body()
    errors = validate_dependencies_payload(payload)
    if errors:
        raise ValidationError(errors)
    return jsonify({"dependencies": suggest_dependencies(payload["tasks"]), "aiPowered": False})


@bp.post("/optimize-schedule")
@require_permission("schedules.view")
def optimize():
    payload = json_body()
    errors = validate_optimize_payload(payload)
    if errors:
        raise ValidationError(errors)

    s = db_session()
    schedule = s.get(Schedule, int(payload["scheduleId"]))
    if not schedule or not get_visible_project(s, g.current_user, schedule.project_id):
        abort(404, description="Schedule not found")
    tasks = s.query(Task).filter(Task.schedule_id == schedule.id).order_by(Task.due_date.asc(), Task.id.asc()).all()
    return jsonify({"optimizedSchedule": optimize_schedule(schedule, tasks), "aiPowered": False})


@bp.get("/insights/<int:project_id>")
@require_permission("projects.view")
def insights(project_id: int):
    s = db_session()
    project = get_visible_project(s, g.current_user, project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")
    tasks = s.query(Task).join(Schedule, Schedule.id == Task.schedule_id).filter(Schedule.project_id == project.id).all()
    return jsonify({"insights": project_insights(project, tasks), "aiPowered": False})


@bp.post("/feedback")
@require_permission("assistant.use")
def feedback():
    payload = json_body()
    errors = validate_feedback_payload(payload)
    if errors:
        raise ValidationError(errors)

    s = db_session()
    record_feedback(s, payload, g.current_user)
    s.commit()
    fb = payload["userFeedback"]
    current_app.logger.info(
        "Task breakdown feedback: projectType=%s accepted=%s rejected=%s",
        payload["projectType"],
        len(fb["acceptedTasks"]),
        len(fb["rejectedTasks"]),
    )
    return jsonify({"message": "Feedback recorded successfully"})


@bp.get("/learning-insights")
@require_permission("assistant.use")
def learning():
    return jsonify({"insights": learning_insights(load_feedback(db_session()))})
