from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.rdcpm.audit import record_event
from app.rdcpm.constants import SECTION_TYPES
from app.rdcpm.utils import is_region_id

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from app.rdcpm.models import User
    from app.rdcpm.modules.region_content.models import RegionContentSection

_UPDATABLE = ("title", "content", "displayOrder", "isVisible", "metadata")


def validate_section_payload(payload: dict, *, partial: bool = False) -> list[str]:
    """Validate section upsert/update payload. Returns list of errors."""
    errors: list[str] = []
    if not partial:
        if not is_region_id(payload.get("regionId")):
            errors.append("regionId is required (letters, digits, '-' or '_').")
        if payload.get("sectionType") not in SECTION_TYPES:
            errors.append(f"Invalid sectionType. Must be one of: {', '.join(SECTION_TYPES)}")

    for key, label in (("title", "Title"), ("content", "Content")):
        if partial and key not in payload:
            continue
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{label} is required.")

    order = payload.get("displayOrder")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        errors.append("displayOrder must be a whole number.")
    visible = payload.get("isVisible")
    if visible is not None and not isinstance(visible, bool):
        errors.append("isVisible must be true or false.")
    metadata = payload.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        errors.append("metadata must be an object.")

    if partial and not errors and not any(key in payload for key in _UPDATABLE):
        errors.append("No fields to update.")
    return errors


def sections_query(s: "Session", region_id: str, *, visible_only: bool = True) -> "Query":
    from app.rdcpm.modules.region_content.models import RegionContentSection

    q = s.query(RegionContentSection).filter(RegionContentSection.region_id == region_id)
    if visible_only:
        q = q.filter(RegionContentSection.is_visible.is_(True))
    return q.order_by(RegionContentSection.display_order.asc(), RegionContentSection.created_at.asc())


def find_section(s: "Session", region_id: str, section_type: str, *, visible_only: bool = False) -> "RegionContentSection | None":
    from app.rdcpm.modules.region_content.models import RegionContentSection

    q = s.query(RegionContentSection).filter(
        RegionContentSection.region_id == region_id,
        RegionContentSection.section_type == section_type,
    )
    if visible_only:
        q = q.filter(RegionContentSection.is_visible.is_(True))
    return q.one_or_none()


def upsert_section(s: "Session", payload: dict, user: "User") -> tuple["RegionContentSection", bool]:
    """
    Create the (region, sectionType) section or overwrite the existing one.
    Omitted displayOrder/isVisible reset to 0/true. Returns (section, created).
    """
    from app.rdcpm.modules.region_content.models import RegionContentSection

    now = datetime.utcnow()
    section = find_section(s, payload["regionId"], payload["sectionType"])
    created = section is None
    if created:
        section = RegionContentSection(
            region_id=payload["regionId"],
            section_type=payload["sectionType"],
            created_by_user_id=user.id,
            created_at=now,
        )
        s.add(section)

    section.title = payload["title"].strip()
    section.content = payload["content"].strip()
    section.display_order = payload.get("displayOrder") or 0
    section.is_visible = payload.get("isVisible", True) is not False
    section.extra = payload.get("metadata")
    section.updated_at = now
    s.flush()

    record_event(
        s,
        actor=user,
        action="region_content.create" if created else "region_content.update",
        entity_type="RegionContentSection",
        entity_id=section.id,
        metadata={"region_id": section.region_id, "section_type": section.section_type},
    )
    return section, created


def update_section(s: "Session", section: "RegionContentSection", payload: dict, user: "User") -> "RegionContentSection":
    changed: list[str] = []
    for key in ("title", "content"):
        if key in payload:
            setattr(section, key, payload[key].strip())
            changed.append(key)
    if "displayOrder" in payload:
        section.display_order = payload.get("displayOrder") or 0
        changed.append("display_order")
    if "isVisible" in payload:
        section.is_visible = payload.get("isVisible") is not False
        changed.append("is_visible")
    if "metadata" in payload:
        section.extra = payload.get("metadata")
        changed.append("metadata")

    section.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="region_content.update",
        entity_type="RegionContentSection",
        entity_id=section.id,
        metadata={"fields": changed},
    )
    return section


def delete_section(s: "Session", section: "RegionContentSection", user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="region_content.delete",
        entity_type="RegionContentSection",
        entity_id=section.id,
        metadata={"region_id": section.region_id, "section_type": section.section_type},
    )
    s.delete(section)
