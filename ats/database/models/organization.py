"""
Organization model with its notes and history tables.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import ArchiveMixin, Base, HistoryMixin, NoteMixin, RecordMixin


class Organization(RecordMixin, ArchiveMixin, Base):
    """
    Client company that owns jobs and employs hiring managers.

    Attributes:
        name: Legal or display name
        status: Relationship status, "Archived" marks the record for cleanup
        perm_fee: Permanent placement fee percentage
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    nicknames: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    parent_organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Active")
    contract_on_file: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contract_signed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_contract_signed: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    year_founded: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    overview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    perm_fee: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    num_employees: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    num_offices: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


class OrganizationNote(NoteMixin, Base):
    __tablename__ = "organization_notes"
    __entity_table__ = "organizations"


class OrganizationHistory(HistoryMixin, Base):
    __tablename__ = "organization_history"
