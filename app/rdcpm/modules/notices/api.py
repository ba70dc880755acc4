from __future__ import annotations

from flask import Blueprint, abort, g, jsonify

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.modules.notices.models import RegionNotice
from app.rdcpm.modules.notices.service import (
    all_notices,
    create_notice,
    delete_notice,
    published_notices,
    require_publish_flag,
    set_published,
    update_notice,
    validate_notice_payload,
)
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import json_body

bp = Blueprint("notices", __name__)


def _notice_or_404(s, notice_id: str) -> RegionNotice:
    notice = s.get(RegionNotice, notice_id)
    if notice is None:
        abort(404, description="Notice not found")
    return notice


@bp.get("/region/<region_id>")
def region_notices(region_id: str):
    """Public: published, unexpired notices for a region."""
    notices = published_notices(db_session(), region_id)
    return jsonify({"notices": [n.to_dict() for n in notices]})


@bp.get("/region/<region_id>/all")
@require_permission("regions.manage")
def region_notices_all(region_id: str):
    notices = all_notices(db_session(), region_id)
    return jsonify({"notices": [n.to_dict(admin=True) for n in notices]})


@bp.post("/", strict_slashes=False)
@require_permission("regions.manage")
def notice_create():
    payload = json_body()
    errors = validate_notice_payload(payload)
    if errors:
        raise ValidationError(errors)
    s = db_session()
    notice = create_notice(s, payload, g.current_user)
    s.commit()
    return jsonify({"notice": notice.to_dict(admin=True)}), 201


@bp.put("/<notice_id>")
@require_permission("regions.manage")
def notice_update(notice_id: str):
    s = db_session()
    notice = _notice_or_404(s, notice_id)
    payload = json_body()
    errors = validate_notice_payload(payload, partial=True)
    if errors:
        raise ValidationError(errors)
    update_notice(s, notice, payload, g.current_user)
    s.commit()
    return jsonify({"notice": notice.to_dict(admin=True)})


@bp.patch("/<notice_id>/publish")
@require_permission("regions.manage")
def notice_publish(notice_id: str):
    s = db_session()
    notice = _notice_or_404(s, notice_id)
    set_published(s, notice, require_publish_flag(json_body()), g.current_user)
    s.commit()
    return jsonify({"notice": notice.to_dict(admin=True)})


@bp.delete("/<notice_id>")
@require_permission("regions.manage")
def notice_delete(notice_id: str):
    s = db_session()
    notice = _notice_or_404(s, notice_id)
    delete_notice(s, notice, g.current_user)
    s.commit()
    return jsonify({"success": True, "message": "Notice deleted successfully"})
