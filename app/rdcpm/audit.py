import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.rdcpm.models import AuditEvent, User


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """
    Append-only audit event helper.
    """
    in_request = has_request_context()
    rid = request_id or (getattr(g, "request_id", None) if in_request else None)
    ev = AuditEvent(
        request_id=rid,
        actor_user_id=actor.id if actor else None,
        actor_username=actor.username if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
        client_ip=request.remote_addr if in_request else None,
    )
    s.add(ev)
    return ev


def event_to_dict(ev: AuditEvent) -> dict[str, Any]:
    try:
        metadata = json.loads(ev.metadata_json) if ev.metadata_json else None
    except ValueError:
        metadata = {"raw": ev.metadata_json}
    return {
        "id": ev.id,
        "createdAt": ev.created_at.isoformat() if ev.created_at else None,
        "requestId": ev.request_id,
        "userId": ev.actor_user_id,
        "username": ev.actor_username,
        "action": ev.action,
        "entityType": ev.entity_type,
        "entityId": ev.entity_id,
        "reason": ev.reason,
        "metadata": metadata,
        "clientIp": ev.client_ip,
    }
