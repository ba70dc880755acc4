from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import case, or_

from app.rdcpm.audit import record_event
from app.rdcpm.constants import NOTICE_CATEGORIES, NOTICE_PRIORITY_ORDER, PRIORITIES
from app.rdcpm.errors import ValidationError
from app.rdcpm.utils import is_region_id, parse_datetime

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.rdcpm.models import User
    from app.rdcpm.modules.notices.models import RegionNotice

NOTICE_LIST_LIMIT = 100

_UPDATABLE = ("title", "content", "category", "priority", "expiresAt")


def validate_notice_payload(payload: dict, *, partial: bool = False) -> list[str]:
    """Validate notice create/update payload. Returns list of errors."""
    errors: list[str] = []
    if not partial and not is_region_id(payload.get("regionId")):
        errors.append("regionId is required (letters, digits, '-' or '_').")

    for key, label in (("title", "Title"), ("content", "Content")):
        if partial and key not in payload:
            continue
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{label} is required.")
    if len(str(payload.get("title") or "")) > 255:
        errors.append("Title must be at most 255 characters.")

    category = payload.get("category")
    if category is not None and category not in NOTICE_CATEGORIES:
        errors.append(f"Invalid category. Must be one of: {', '.join(NOTICE_CATEGORIES)}")
    priority = payload.get("priority")
    if priority is not None and priority not in PRIORITIES:
        errors.append(f"Invalid priority. Must be one of: {', '.join(PRIORITIES)}")

    try:
        parse_datetime(payload.get("expiresAt"))
    except (TypeError, ValueError):
        errors.append("expiresAt must be an ISO timestamp.")

    if partial and not errors and not any(key in payload for key in _UPDATABLE):
        errors.append("No fields to update.")
    return errors


def published_notices(s: "Session", region_id: str, now: datetime | None = None) -> list["RegionNotice"]:
    """Published, unexpired notices of a region; most urgent first, then newest."""
    from app.rdcpm.modules.notices.models import RegionNotice

    now = now or datetime.utcnow()
    priority_rank = case(NOTICE_PRIORITY_ORDER, value=RegionNotice.priority, else_=len(NOTICE_PRIORITY_ORDER) + 1)
    return (
        s.query(RegionNotice)
        .filter(
            RegionNotice.region_id == region_id,
            RegionNotice.is_published.is_(True),
            or_(RegionNotice.expires_at.is_(None), RegionNotice.expires_at > now),
        )
        .order_by(priority_rank, RegionNotice.published_at.desc())
        .limit(NOTICE_LIST_LIMIT)
        .all()
    )


def all_notices(s: "Session", region_id: str) -> list["RegionNotice"]:
    from app.rdcpm.modules.notices.models import RegionNotice

    return (
        s.query(RegionNotice)
        .filter(RegionNotice.region_id == region_id)
        .order_by(RegionNotice.created_at.desc())
        .limit(NOTICE_LIST_LIMIT)
        .all()
    )


def create_notice(s: "Session", payload: dict, user: "User") -> "RegionNotice":
    """Create a notice. Emergency notices are published immediately."""
    from app.rdcpm.modules.notices.models import RegionNotice

    now = datetime.utcnow()
    category = payload.get("category") or "general"
    emergency = category == "emergency"
    notice = RegionNotice(
        region_id=payload["regionId"],
        title=payload["title"].strip(),
        content=payload["content"].strip(),
        category=category,
        priority=payload.get("priority") or "medium",
        is_published=emergency,
        published_at=now if emergency else None,
        expires_at=parse_datetime(payload.get("expiresAt")),
        created_by_user_id=user.id,
        created_at=now,
        updated_at=now,
    )
    s.add(notice)
    s.flush()
    record_event(
        s,
        actor=user,
        action="notice.create",
        entity_type="RegionNotice",
        entity_id=notice.id,
        metadata={"region_id": notice.region_id, "category": category, "published": emergency},
    )
    return notice


def update_notice(s: "Session", notice: "RegionNotice", payload: dict, user: "User") -> "RegionNotice":
    changes: dict[str, dict] = {}
    for key in ("title", "content"):
        if key in payload:
            new = payload[key].strip()
            if new != getattr(notice, key):
                changes[key] = {"old": getattr(notice, key), "new": new}
                setattr(notice, key, new)
    for key in ("category", "priority"):
        new = payload.get(key)
        if new and new != getattr(notice, key):
            changes[key] = {"old": getattr(notice, key), "new": new}
            setattr(notice, key, new)
    if "expiresAt" in payload:
        new = parse_datetime(payload.get("expiresAt"))
        if new != notice.expires_at:
            changes["expires_at"] = {"old": str(notice.expires_at), "new": str(new)}
            notice.expires_at = new

    notice.updated_at = datetime.utcnow()
    if changes:
        record_event(
            s,
            actor=user,
            action="notice.update",
            entity_type="RegionNotice",
            entity_id=notice.id,
            metadata={"changes": changes},
        )
    return notice


def set_published(s: "Session", notice: "RegionNotice", is_published: bool, user: "User") -> "RegionNotice":
    now = datetime.utcnow()
    notice.is_published = is_published
    notice.published_at = now if is_published else None
    notice.updated_at = now
    record_event(
        s,
        actor=user,
        action="notice.publish" if is_published else "notice.unpublish",
        entity_type="RegionNotice",
        entity_id=notice.id,
        metadata={"region_id": notice.region_id},
    )
    return notice


def delete_notice(s: "Session", notice: "RegionNotice", user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="notice.delete",
        entity_type="RegionNotice",
        entity_id=notice.id,
        metadata={"region_id": notice.region_id, "title": notice.title},
    )
    s.delete(notice)


def require_publish_flag(payload: dict) -> bool:
    value = payload.get("isPublished")
    if not isinstance(value, bool):
        raise ValidationError(["isPublished must be true or false."])
    return value
