from __future__ import annotations

from datetime import datetime

from flask import Blueprint, Response, abort, current_app, g, jsonify, request

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.models import User
from app.rdcpm.modules.projects.models import Project
from app.rdcpm.modules.projects.service import (
    create_project,
    delete_project,
    export_projects_csv,
    filter_projects,
    get_visible_project,
    update_project,
    validate_project_payload,
    visible_projects_query,
)
from app.rdcpm.notifications import budget_alert_threshold, send_budget_alert
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import clean_str, json_body

bp = Blueprint("projects", __name__)

_MAX_PER_PAGE = 100


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _filtered_query(s, user: User):
    return filter_projects(
        visible_projects_query(s, user),
        status=(request.args.get("status") or "").strip() or None,
        priority=(request.args.get("priority") or "").strip() or None,
        search=(request.args.get("q") or "").strip() or None,
    )


@bp.get("/", strict_slashes=False)
@require_permission("projects.view")
def projects_list():
    s = db_session()
    q = _filtered_query(s, _current_user())

    # Pagination
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    per_page = request.args.get("per_page", 50, type=int) or 50
    per_page = min(max(per_page, 1), _MAX_PER_PAGE)

    total = q.count()
    projects = q.order_by(Project.created_at.desc(), Project.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return jsonify(
        {
            "projects": [p.to_dict() for p in projects],
            "pagination": {
                "page": page,
                "perPage": per_page,
                "total": total,
                "totalPages": (total + per_page - 1) // per_page,
            },
        }
    )


@bp.get("/export")
@require_permission("projects.export")
def projects_export():
    s = db_session()
    projects = _filtered_query(s, _current_user()).order_by(Project.code.asc()).all()
    filename = f"projects_{datetime.utcnow().strftime('%Y%m%d')}.csv"
    return Response(
        export_projects_csv(projects),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@bp.get("/<int:project_id>")
@require_permission("projects.view")
def project_detail(project_id: int):
    s = db_session()
    project = get_visible_project(s, _current_user(), project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")
    return jsonify({"project": project.to_dict()})


@bp.post("/", strict_slashes=False)
@require_permission("projects.create")
def project_create():
    payload = json_body()
    errors = validate_project_payload(payload)
    if errors:
        raise ValidationError(errors)

    s = db_session()
    project = create_project(s, payload, _current_user())
    s.commit()
    return jsonify({"project": project.to_dict()}), 201


@bp.put("/<int:project_id>")
@require_permission("projects.edit")
def project_update(project_id: int):
    s = db_session()
    user = _current_user()
    project = get_visible_project(s, user, project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")

    payload = json_body()
    errors = validate_project_payload(payload, partial=True)
    if errors:
        raise ValidationError(errors)

    reason = clean_str(payload.get("reason"))
    alert_ratio = update_project(
        s, project, payload, user, reason=reason, threshold=budget_alert_threshold(current_app.config)
    )
    s.commit()
    if alert_ratio is not None:
        send_budget_alert(s, config=current_app.config, project=project, user=user, ratio=alert_ratio)
        s.commit()
    return jsonify({"project": project.to_dict()})


@bp.delete("/<int:project_id>")
@require_permission("projects.delete")
def project_delete(project_id: int):
    s = db_session()
    user = _current_user()
    project = get_visible_project(s, user, project_id)
    if not project:
        abort(404, description="Project does not exist or you do not have access")
    reason = None
    if request.is_json:
        reason = clean_str(json_body().get("reason"))
    delete_project(s, project, user, reason=reason)
    s.commit()
    return jsonify({"message": "Project deleted successfully"})
