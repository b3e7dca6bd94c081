"""
Job model with its notes and history tables.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import ArchiveMixin, Base, HistoryMixin, NoteMixin, RecordMixin


class Job(RecordMixin, ArchiveMixin, Base):
    """
    Open position at a client organization.

    Jobs are removed together with their organization.
    """

    __tablename__ = "jobs"

    job_title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    job_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    organization_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    hiring_manager: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Open")
    priority: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    employment_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    worksite_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    remote_option: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    job_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    salary_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    min_salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    benefits: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    required_skills: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    job_board_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_added: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class JobNote(NoteMixin, Base):
    __tablename__ = "job_notes"
    __entity_table__ = "jobs"


class JobHistory(HistoryMixin, Base):
    __tablename__ = "job_history"
