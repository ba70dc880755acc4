from __future__ import annotations

from flask import Blueprint, abort, current_app, g, jsonify

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.modules.dashboard.health import calculate_health_score, inputs_from_payload, inputs_from_project
from app.rdcpm.modules.dashboard.service import build_summary
from app.rdcpm.modules.projects.service import get_visible_project
from app.rdcpm.modules.schedules.models import Schedule, Task
from app.rdcpm.notifications import budget_alert_threshold
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import json_body

bp = Blueprint("dashboard", __name__)


@bp.get("/dashboard/summary")
@require_permission("dashboard.view")
def dashboard_summary():
    s = db_session()
    threshold = budget_alert_threshold(current_app.config)
    return jsonify({"summary": build_summary(s, g.current_user, threshold=threshold)})


@bp.get("/health/<int:project_id>")
@require_permission("dashboard.view")
def project_health(project_id: int):
    s = db_session()
    project = get_visible_project(s, g.current_user, project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")
    tasks = s.query(Task).join(Schedule, Schedule.id == Task.schedule_id).filter(Schedule.project_id == project.id).all()
    health = calculate_health_score(inputs_from_project(project, tasks))
    return jsonify({"success": True, "projectId": project.id, "health": health})


@bp.post("/health/calculate")
@require_permission("dashboard.view")
def health_calculate():
    payload = json_body()
    try:
        inputs = inputs_from_payload(payload)
    except (TypeError, ValueError) as e:
        raise ValidationError([str(e)])
    return jsonify({"success": True, "health": calculate_health_score(inputs)})
