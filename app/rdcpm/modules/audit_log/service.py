from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func

from app.rdcpm.models import AuditEvent

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def parse_bound(raw: str | None, *, end: bool = False) -> datetime | None:
    """ISO date or datetime. A bare end date covers the whole day. Raises ValueError."""
    raw = (raw or "").strip()
    if not raw:
        return None
    if len(raw) == 10:
        d = datetime.fromisoformat(raw)
        return d + timedelta(days=1) if end else d
    return datetime.fromisoformat(raw.replace("Z", "+00:00")).replace(tzinfo=None)


def filtered_events(
    s: "Session",
    *,
    user_id: int | None = None,
    action: str | None = None,
    entity_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> "Query":
    q = s.query(AuditEvent)
    if user_id is not None:
        q = q.filter(AuditEvent.actor_user_id == user_id)
    if action:
        q = q.filter(AuditEvent.action == action)
    if entity_type:
        q = q.filter(AuditEvent.entity_type == entity_type)
    if start:
        q = q.filter(AuditEvent.created_at >= start)
    if end:
        q = q.filter(AuditEvent.created_at < end)
    return q


def clamp_limit(raw: int | None) -> int:
    if not raw or raw < 1:
        return DEFAULT_LIMIT
    return min(raw, MAX_LIMIT)


def audit_stats(s: "Session") -> dict:
    def _grouped(col) -> dict[str, int]:
        rows = s.query(col, func.count(AuditEvent.id)).filter(col.isnot(None)).group_by(col).all()
        return {str(k): int(n) for k, n in rows}

    return {
        "totalEvents": s.query(func.count(AuditEvent.id)).scalar() or 0,
        "eventsByAction": _grouped(AuditEvent.action),
        "eventsByEntity": _grouped(AuditEvent.entity_type),
        "eventsByUser": _grouped(AuditEvent.actor_username),
    }
