from __future__ import annotations

from flask import Blueprint, abort, g, jsonify

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.modules.region_content.models import RegionContentSection
from app.rdcpm.modules.region_content.service import (
    delete_section,
    find_section,
    sections_query,
    update_section,
    upsert_section,
    validate_section_payload,
)
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import json_body

bp = Blueprint("region_content", __name__)


def _section_or_404(s, section_id: str) -> RegionContentSection:
    section = s.get(RegionContentSection, section_id)
    if section is None:
        abort(404, description="Section not found")
    return section


@bp.get("/region/<region_id>")
def region_sections(region_id: str):
    """Public: visible sections in display order."""
    sections = sections_query(db_session(), region_id).all()
    return jsonify({"sections": [sec.to_dict() for sec in sections]})


@bp.get("/region/<region_id>/all")
@require_permission("regions.manage")
def region_sections_all(region_id: str):
    sections = sections_query(db_session(), region_id, visible_only=False).all()
    return jsonify({"sections": [sec.to_dict(admin=True) for sec in sections]})


@bp.get("/region/<region_id>/section/<section_type>")
def region_section(region_id: str, section_type: str):
    section = find_section(db_session(), region_id, section_type, visible_only=True)
    if section is None:
        abort(404, description="Section not found")
    return jsonify({"section": section.to_dict()})


@bp.post("/", strict_slashes=False)
@require_permission("regions.manage")
def section_upsert():
    payload = json_body()
    errors = validate_section_payload(payload)
    if errors:
        raise ValidationError(errors)
    s = db_session()
    section, created = upsert_section(s, payload, g.current_user)
    s.commit()
    return jsonify({"section": section.to_dict(admin=True)}), 201 if created else 200


@bp.put("/<section_id>")
@require_permission("regions.manage")
def section_update(section_id: str):
    s = db_session()
    section = _section_or_404(s, section_id)
    payload = json_body()
    errors = validate_section_payload(payload, partial=True)
    if errors:
        raise ValidationError(errors)
    update_section(s, section, payload, g.current_user)
    s.commit()
    return jsonify({"section": section.to_dict(admin=True)})


@bp.delete("/<section_id>")
@require_permission("regions.manage")
def section_delete(section_id: str):
    s = db_session()
    section = _section_or_404(s, section_id)
    delete_section(s, section, g.current_user)
    s.commit()
    return jsonify({"success": True, "message": "Section deleted successfully"})
