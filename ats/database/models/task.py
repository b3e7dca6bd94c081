"""
Task model with its notes and history tables.

Tasks carry an optional reminder: ``reminder_minutes_before_due`` is the
offset before ``due_date``/``due_time`` at which the reminder sweep emails
the creator and the assignee, and ``reminder_sent_at`` records that it went
out so the sweep never sends twice.
"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import ArchiveMixin, Base, HistoryMixin, NoteMixin, RecordMixin


class Task(RecordMixin, ArchiveMixin, Base):
    """To-do item optionally linked to other records."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    due_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    organization_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True
    )
    job_seeker_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("job_seekers.id", ondelete="CASCADE"), nullable=True
    )
    hiring_manager_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("hiring_managers.id", ondelete="CASCADE"), nullable=True
    )
    job_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=True
    )
    lead_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=True
    )

    owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    reminder_minutes_before_due: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class TaskNote(NoteMixin, Base):
    __tablename__ = "task_notes"
    __entity_table__ = "tasks"


class TaskHistory(HistoryMixin, Base):
    __tablename__ = "task_history"
