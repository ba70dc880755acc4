from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.rdcpm.audit import event_to_dict
from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.models import AuditEvent
from app.rdcpm.modules.audit_log.service import audit_stats, clamp_limit, filtered_events, parse_bound
from app.rdcpm.rbac import require_permission

bp = Blueprint("audit", __name__)


@bp.get("/events")
@require_permission("audit.view")
def audit_events():
    try:
        start = parse_bound(request.args.get("start"))
        end = parse_bound(request.args.get("end"), end=True)
    except ValueError:
        raise ValidationError(["start/end must be ISO dates (YYYY-MM-DD)."])

    s = db_session()
    q = filtered_events(
        s,
        user_id=request.args.get("user_id", type=int),
        action=(request.args.get("action") or "").strip() or None,
        entity_type=(request.args.get("entity_type") or "").strip() or None,
        start=start,
        end=end,
    )
    limit = clamp_limit(request.args.get("limit", type=int))
    events = q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(limit).all()
    return jsonify({"events": [event_to_dict(ev) for ev in events], "count": len(events), "limit": limit})


@bp.get("/stats")
@require_permission("audit.view")
def audit_stats_view():
    return jsonify({"stats": audit_stats(db_session())})
