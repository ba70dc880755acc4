from __future__ import annotations

import json
from typing import TYPE_CHECKING

from app.rdcpm.audit import record_event

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.rdcpm.models import User

FEEDBACK_ACTION = "ai.feedback"


def _list_of(value, kind) -> bool:
    return isinstance(value, list) and all(isinstance(v, kind) for v in value)


def validate_analyze_payload(payload: dict) -> list[str]:
    errors = []
    description = payload.get("projectDescription")
    if not isinstance(description, str) or len(description.strip()) < 10:
        errors.append("projectDescription must be at least 10 characters.")
    if payload.get("projectType") is not None and not isinstance(payload.get("projectType"), str):
        errors.append("projectType must be a string.")
    existing = payload.get("existingTasks")
    if existing is not None and not _list_of(existing, dict):
        errors.append("existingTasks must be a list of objects.")
    return errors


def validate_dependencies_payload(payload: dict) -> list[str]:
    tasks = payload.get("tasks")
    if not _list_of(tasks, dict):
        return ["tasks must be a list of objects."]
    errors = []
    for i, t in enumerate(tasks):
        if t.get("id") in (None, "") or not isinstance(t.get("name"), str):
            errors.append(f"tasks[{i}] needs an id and a name.")
    return errors


def validate_optimize_payload(payload: dict) -> list[str]:
    errors = []
    try:
        int(payload.get("scheduleId"))
    except (TypeError, ValueError):
        errors.append("scheduleId is required.")
    goals = payload.get("optimizationGoals")
    if goals is not None and not _list_of(goals, str):
        errors.append("optimizationGoals must be a list of strings.")
    constraints = payload.get("constraints")
    if constraints is not None and not isinstance(constraints, dict):
        errors.append("constraints must be an object.")
    return errors


def validate_feedback_payload(payload: dict) -> list[str]:
    errors = []
    for key in ("projectType", "projectDescription"):
        if not isinstance(payload.get(key), str):
            errors.append(f"{key} is required.")
    if not _list_of(payload.get("generatedTasks"), dict):
        errors.append("generatedTasks must be a list of objects.")
    fb = payload.get("userFeedback")
    if not isinstance(fb, dict):
        errors.append("userFeedback is required.")
        return errors
    if not _list_of(fb.get("acceptedTasks"), str):
        errors.append("userFeedback.acceptedTasks must be a list of task ids.")
    if not _list_of(fb.get("rejectedTasks"), str):
        errors.append("userFeedback.rejectedTasks must be a list of task ids.")
    if not _list_of(fb.get("modifiedTasks"), dict):
        errors.append("userFeedback.modifiedTasks must be a list of objects.")
    return errors


def record_feedback(s: "Session", payload: dict, user: "User") -> None:
    fb = payload["userFeedback"]
    record_event(
        s,
        actor=user,
        action=FEEDBACK_ACTION,
        entity_type="TaskBreakdown",
        entity_id=payload["projectType"],
        metadata={
            "projectType": payload["projectType"],
            "generatedTasks": len(payload["generatedTasks"]),
            "acceptedTasks": fb["acceptedTasks"],
            "rejectedTasks": fb["rejectedTasks"],
            "modifiedTasks": fb["modifiedTasks"],
            "actualDurations": fb.get("actualDurations") or {},
            "actualComplexities": fb.get("actualComplexities") or {},
        },
    )


def load_feedback(s: "Session") -> list[dict]:
    """Stored feedback payloads, oldest first."""
    from app.rdcpm.models import AuditEvent

    events = (
        s.query(AuditEvent)
        .filter(AuditEvent.action == FEEDBACK_ACTION)
        .order_by(AuditEvent.created_at.asc(), AuditEvent.id.asc())
        .all()
    )
    out = []
    for ev in events:
        try:
            data = json.loads(ev.metadata_json or "{}")
        except ValueError:
            continue
        if isinstance(data, dict):
            out.append(data)
    return out
