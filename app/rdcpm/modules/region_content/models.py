from __future__ import annotations

import json
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.rdcpm.models import Base


class RegionContentSection(Base):
    __tablename__ = "region_content_sections"
    __table_args__ = (UniqueConstraint("region_id", "section_type", name="uq_region_content_section"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    region_id: Mapped[str] = mapped_column(String(64), nullable=False)
    section_type: Mapped[str] = mapped_column(String(32), nullable=False)  # about, contact, services, ...

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # free-form JSON object

    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    @property
    def extra(self) -> dict | None:
        if not self.metadata_json:
            return None
        try:
            value = json.loads(self.metadata_json)
        except ValueError:
            return None
        return value if isinstance(value, dict) else None

    @extra.setter
    def extra(self, value: dict | None) -> None:
        self.metadata_json = json.dumps(value) if value else None

    def to_dict(self, *, admin: bool = False) -> dict:
        data = {
            "id": self.id,
            "regionId": self.region_id,
            "sectionType": self.section_type,
            "title": self.title,
            "content": self.content,
            "displayOrder": self.display_order,
            "isVisible": self.is_visible,
            "metadata": self.extra,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if admin:
            data["createdBy"] = self.created_by_user_id
        return data
