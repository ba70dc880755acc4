from __future__ import annotations

from flask import Blueprint, abort, current_app, g, jsonify

from app.rdcpm.db import db_session
from app.rdcpm.errors import ValidationError
from app.rdcpm.modules.assistant.replies import AI_DISABLED_REPLY, INSIGHT_TITLES, INSIGHT_TYPES, INSIGHTS
from app.rdcpm.modules.assistant.service import (
    delete_conversation,
    get_conversation,
    list_conversations,
    send_message,
    validate_message_payload,
)
from app.rdcpm.modules.projects.service import get_visible_project
from app.rdcpm.rbac import require_permission
from app.rdcpm.utils import json_body

bp = Blueprint("assistant", __name__)


@bp.post("/insight")
@require_permission("assistant.use")
def insight():
    payload = json_body()
    kind = payload.get("type") or "chat"
    if kind not in INSIGHT_TYPES:
        raise ValidationError([f"Invalid type. Must be one of: {', '.join(INSIGHT_TYPES)}"])
    if not current_app.config.get("AI_ENABLED"):
        text = AI_DISABLED_REPLY
    else:
        text = INSIGHTS[kind]
    return jsonify({"type": kind, "title": INSIGHT_TITLES[kind], "response": text, "aiPowered": False})


@bp.post("/message")
@require_permission("assistant.use")
def message():
    payload = json_body()
    errors = validate_message_payload(payload)
    if errors:
        raise ValidationError(errors)

    s = db_session()
    user = g.current_user
    conversation = None
    conversation_id = payload.get("conversationId")
    if conversation_id:
        conversation = get_conversation(s, user, str(conversation_id))
        if conversation is None:
            abort(404, description="Conversation not found")

    context = payload.get("context") or {}
    project = None
    project_id = context.get("projectId")
    if project_id not in (None, ""):
        try:
            project = get_visible_project(s, user, int(project_id))
        except (TypeError, ValueError):
            raise ValidationError(["context.projectId must be a project id."])
        if project is None:
            abort(404, description="Project does not exist or you do not have access")

    conversation, topic, reply = send_message(
        s,
        user,
        message=payload["message"].strip(),
        conversation=conversation,
        context=context,
        project=project,
        ai_enabled=bool(current_app.config.get("AI_ENABLED")),
    )
    s.commit()
    return jsonify({"reply": reply, "topic": topic, "conversationId": conversation.id, "aiPowered": False})


@bp.get("/conversations")
@require_permission("assistant.use")
def conversations_list():
    s = db_session()
    return jsonify({"conversations": [c.to_dict() for c in list_conversations(s, g.current_user)]})


@bp.get("/conversations/<conversation_id>")
@require_permission("assistant.use")
def conversation_detail(conversation_id: str):
    s = db_session()
    conversation = get_conversation(s, g.current_user, conversation_id)
    if conversation is None:
        abort(404, description="Conversation not found")
    return jsonify({"conversation": conversation.to_dict(with_messages=True)})


@bp.delete("/conversations/<conversation_id>")
@require_permission("assistant.use")
def conversation_delete(conversation_id: str):
    s = db_session()
    conversation = get_conversation(s, g.current_user, conversation_id)
    if conversation is None:
        abort(404, description="Conversation not found")
    delete_conversation(s, conversation, g.current_user)
    s.commit()
    return jsonify({"success": True})
