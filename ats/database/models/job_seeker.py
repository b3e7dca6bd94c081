"""
Job seeker (candidate) model with its notes and history tables.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import Base, HistoryMixin, NoteMixin, RecordMixin


class JobSeeker(RecordMixin, Base):
    """Candidate tracked through the hiring pipeline."""

    __tablename__ = "job_seekers"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mobile_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zip: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="New lead")
    current_organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    resume_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    skills: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    desired_salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_added: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_contact_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class JobSeekerNote(NoteMixin, Base):
    __tablename__ = "job_seeker_notes"
    __entity_table__ = "job_seekers"


class JobSeekerHistory(HistoryMixin, Base):
    __tablename__ = "job_seeker_history"
