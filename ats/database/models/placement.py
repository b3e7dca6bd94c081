"""
Placement model with its notes and history tables.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import ArchiveMixin, Base, HistoryMixin, NoteMixin, RecordMixin


class Placement(RecordMixin, ArchiveMixin, Base):
    """
    A job seeker placed into a job.

    Attributes:
        job_id: Job filled by the placement, removed with it
        job_seeker_id: Placed candidate, removed with it
        days_guaranteed: Guarantee period for permanent placements
    """

    __tablename__ = "placements"

    job_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    job_seeker_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("job_seekers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    placement_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending")
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    placement_fee_percent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    placement_fee_flat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    days_guaranteed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hours_of_operation: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    hours_per_day: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pay_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    effective_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    overtime_exemption: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)


class PlacementNote(NoteMixin, Base):
    __tablename__ = "placement_notes"
    __entity_table__ = "placements"


class PlacementHistory(HistoryMixin, Base):
    __tablename__ = "placement_history"
