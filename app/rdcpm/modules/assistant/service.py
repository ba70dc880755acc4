from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.rdcpm.audit import record_event
from app.rdcpm.modules.assistant.replies import AI_DISABLED_REPLY, canned_reply

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.rdcpm.models import User
    from app.rdcpm.modules.assistant.models import AIConversation
    from app.rdcpm.modules.projects.models import Project

HISTORY_LIMIT = 20
LIST_LIMIT = 50
TITLE_LENGTH = 100
CONTEXT_TYPES = ("dashboard", "project", "schedule", "region", "reports", "general")


def conversation_title(message: str) -> str:
    return message[:TITLE_LENGTH] + ("..." if len(message) > TITLE_LENGTH else "")


def validate_message_payload(payload: dict) -> list[str]:
    errors = []
    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        errors.append("Message is required.")
    elif len(message) > 4000:
        errors.append("Message must be at most 4000 characters.")
    context = payload.get("context")
    if context is not None:
        if not isinstance(context, dict):
            errors.append("context must be an object.")
        elif context.get("type") is not None and context.get("type") not in CONTEXT_TYPES:
            errors.append(f"Invalid context type. Must be one of: {', '.join(CONTEXT_TYPES)}")
    return errors


def get_conversation(s: "Session", user: "User", conversation_id: str) -> "AIConversation | None":
    from app.rdcpm.modules.assistant.models import AIConversation

    return (
        s.query(AIConversation)
        .filter(
            AIConversation.id == conversation_id,
            AIConversation.user_id == user.id,
            AIConversation.is_active.is_(True),
        )
        .one_or_none()
    )


def list_conversations(s: "Session", user: "User") -> list["AIConversation"]:
    from app.rdcpm.modules.assistant.models import AIConversation

    return (
        s.query(AIConversation)
        .filter(AIConversation.user_id == user.id, AIConversation.is_active.is_(True))
        .order_by(AIConversation.updated_at.desc())
        .limit(LIST_LIMIT)
        .all()
    )


def project_snapshot(s: "Session", project: "Project") -> dict:
    from app.rdcpm.modules.schedules.models import Schedule, Task

    tasks = s.query(Task).join(Schedule, Schedule.id == Task.schedule_id).filter(Schedule.project_id == project.id).all()
    live = [t for t in tasks if t.status != "cancelled"]
    return {
        "code": project.code,
        "name": project.name,
        "status": project.status,
        "budgetUtilization": project.budget_utilization,
        "totalTasks": len(live),
        "completedTasks": sum(1 for t in live if t.status == "completed"),
    }


def send_message(
    s: "Session",
    user: "User",
    *,
    message: str,
    conversation: "AIConversation | None",
    context: dict | None,
    project: "Project | None",
    ai_enabled: bool,
) -> tuple["AIConversation", str, str]:
    """
    Reply to a message and persist both turns. Returns (conversation, topic, reply).
    """
    from app.rdcpm.modules.assistant.models import AIConversation

    history = conversation.messages[-HISTORY_LIMIT:] if conversation else []
    if ai_enabled:
        snapshot = project_snapshot(s, project) if project else None
        topic, reply = canned_reply(message, history, snapshot)
    else:
        topic, reply = "disabled", AI_DISABLED_REPLY

    now = datetime.utcnow()
    stamp = now.isoformat() + "Z"
    turns = [
        {"role": "user", "content": message, "timestamp": stamp},
        {"role": "assistant", "content": reply, "timestamp": stamp},
    ]
    if conversation is None:
        conversation = AIConversation(
            user_id=user.id,
            project_id=project.id if project else None,
            context_type=(context or {}).get("type") or "general",
            title=conversation_title(message),
            created_at=now,
        )
        conversation.messages = turns
        s.add(conversation)
    else:
        conversation.messages = conversation.messages + turns
    conversation.token_count = (conversation.token_count or 0) + len(message.split()) + len(reply.split())
    conversation.updated_at = now
    s.flush()

    record_event(
        s,
        actor=user,
        action="assistant.message",
        entity_type="AIConversation",
        entity_id=conversation.id,
        metadata={"topic": topic, "project_id": conversation.project_id},
    )
    return conversation, topic, reply


def delete_conversation(s: "Session", conversation: "AIConversation", user: "User") -> None:
    conversation.is_active = False
    conversation.updated_at = datetime.utcnow()
    record_event(s, actor=user, action="assistant.conversation_delete", entity_type="AIConversation", entity_id=conversation.id)
