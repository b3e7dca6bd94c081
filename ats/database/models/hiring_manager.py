"""
Hiring manager model with its notes and history tables.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import (
    ArchiveMixin,
    Base,
    HistoryMixin,
    JSONType,
    NoteMixin,
    RecordMixin,
)


class HiringManager(RecordMixin, ArchiveMixin, Base):
    """
    Contact at a client organization who owns one or more jobs.

    ``organization_id`` has no cascade: an organization cannot be deleted
    while hiring managers still point at it.
    """

    __tablename__ = "hiring_managers"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Active")
    nickname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    organization_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("organizations.id"), nullable=True, index=True
    )
    organization_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reports_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    secondary_owners: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    email2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    office_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mobile_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    direct_line: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    linkedin_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date_added: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_contact_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class HiringManagerNote(NoteMixin, Base):
    __tablename__ = "hiring_manager_notes"
    __entity_table__ = "hiring_managers"


class HiringManagerHistory(HistoryMixin, Base):
    __tablename__ = "hiring_manager_history"
