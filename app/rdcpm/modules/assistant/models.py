from __future__ import annotations

import json
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.rdcpm.models import Base


class AIConversation(Base):
    __tablename__ = "ai_conversations"
    __table_args__ = (Index("idx_ai_conversations_user", "user_id", "is_active", "updated_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    context_type: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    messages_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")  # [{role, content, timestamp}]
    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    @property
    def messages(self) -> list[dict]:
        try:
            value = json.loads(self.messages_json or "[]")
        except ValueError:
            return []
        return value if isinstance(value, list) else []

    @messages.setter
    def messages(self, value: list[dict]) -> None:
        self.messages_json = json.dumps(value)

    def to_dict(self, *, with_messages: bool = False) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "contextType": self.context_type,
            "projectId": self.project_id,
            "tokenCount": self.token_count,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if with_messages:
            data["messages"] = self.messages
        return data
