from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.rdcpm.models import Base
from app.rdcpm.utils import iso as _iso

if TYPE_CHECKING:
    from app.rdcpm.modules.projects.models import Project


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (Index("idx_schedules_project", "project_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")  # pending, active, completed, on_hold, cancelled

    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    project: Mapped["Project"] = relationship("Project", back_populates="schedules")
    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="Task.start_date",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "name": self.name,
            "description": self.description,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "status": self.status,
            "createdBy": self.created_by_user_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_schedule", "schedule_id"),
        Index("idx_tasks_parent", "parent_task_id"),
        Index("idx_tasks_status", "status"),
        Index("idx_tasks_due_date", "due_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    schedule_id: Mapped[int] = mapped_column(ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False)
    parent_task_id: Mapped[int | None] = mapped_column(ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")  # pending, in_progress, completed, cancelled
    priority: Mapped[str] = mapped_column(String(32), nullable=False, default="medium")
    assigned_to: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Dates
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Effort
    estimated_days: Mapped[float | None] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    estimated_duration_hours: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    actual_duration_hours: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    progress_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    work_effort: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Free-text tracking
    dependency: Mapped[str | None] = mapped_column(Text, nullable=True)
    risks: Mapped[str | None] = mapped_column(Text, nullable=True)
    issues: Mapped[str | None] = mapped_column(Text, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    schedule: Mapped[Schedule] = relationship("Schedule", back_populates="tasks")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "scheduleId": self.schedule_id,
            "parentTaskId": self.parent_task_id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "assignedTo": self.assigned_to,
            "dueDate": _iso(self.due_date),
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "estimatedDays": self.estimated_days,
            "estimatedDurationHours": self.estimated_duration_hours,
            "actualDurationHours": self.actual_duration_hours,
            "progressPercentage": self.progress_percentage,
            "workEffort": self.work_effort,
            "dependency": self.dependency,
            "risks": self.risks,
            "issues": self.issues,
            "comments": self.comments,
            "createdBy": self.created_by_user_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
