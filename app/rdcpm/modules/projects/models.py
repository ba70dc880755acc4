from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.rdcpm.models import Base

if TYPE_CHECKING:
    from app.rdcpm.modules.schedules.models import Schedule


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_status", "status"),
        Index("idx_projects_priority", "priority"),
        Index("idx_projects_owner", "owner_user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)  # e.g. "RDC-001"
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)  # infrastructure, education, ...

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="planning")
    priority: Mapped[str] = mapped_column(String(32), nullable=False, default="medium")

    # Budget
    budget_allocated: Mapped[float | None] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=True)
    budget_spent: Mapped[float] = mapped_column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Dates
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    region: Mapped[str | None] = mapped_column(String(128), nullable=True)

    owner_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    project_manager_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    schedules: Mapped[list["Schedule"]] = relationship(
        "Schedule",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    @property
    def budget_utilization(self) -> float | None:
        if not self.budget_allocated:
            return None
        return round(float(self.budget_spent or 0) / float(self.budget_allocated) * 100, 1)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "status": self.status,
            "priority": self.priority,
            "budgetAllocated": float(self.budget_allocated) if self.budget_allocated is not None else None,
            "budgetSpent": float(self.budget_spent or 0),
            "budgetUtilization": self.budget_utilization,
            "currency": self.currency,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "region": self.region,
            "ownerUserId": self.owner_user_id,
            "projectManagerId": self.project_manager_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
