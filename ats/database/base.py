"""
SQLAlchemy declarative base and the mixins shared by every record table.

Each business entity owns three tables: the entity itself, its notes and its
history. ``RecordMixin`` supplies the columns every entity carries (owner,
timestamps, custom fields), ``NoteMixin`` and ``HistoryMixin`` build the two
companion tables from the entity's table name. History rows keep a plain
indexed ``entity_id`` without a foreign key so the audit trail outlives the
record it describes.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

# JSONB on PostgreSQL, generic JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_jsonable(value: Any) -> Any:
    """Convert a column value into a JSON-serializable value."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all SQLAlchemy models with async support.
    """

    __abstract__ = True

    def to_dict(self, exclude: Optional[set[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to a JSON-serializable dictionary.

        Args:
            exclude: Set of column names to exclude from output

        Returns:
            Dictionary keyed by column name

        Example:
            org = Organization(name="Acme", created_by=7)
            data = org.to_dict(exclude={"custom_fields"})
        """
        exclude = exclude or set()
        return {
            column.key: to_jsonable(getattr(self, column.key))
            for column in self.__table__.columns
            if column.key not in exclude
        }

    def __repr__(self) -> str:
        pk_values = []
        for column in self.__table__.primary_key.columns:
            value = getattr(self, column.key, None)
            if value is not None:
                pk_values.append(f"{column.key}={value!r}")

        pk_str = ", ".join(pk_values) if pk_values else "no primary key"
        return f"<{self.__class__.__name__}({pk_str})>"


class TimestampMixin:
    """
    Mixin for created_at / updated_at columns.

    ``updated_at`` is written explicitly by the record store so that a
    no-op update leaves it untouched.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            comment="Timestamp when record was created",
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            comment="Timestamp when record was last updated",
        )


class RecordMixin(TimestampMixin):
    """
    Columns shared by every business entity table.

    Attributes:
        id: Serial primary key
        created_by: Owning user, set once at creation
        custom_fields: Admin-defined attributes keyed by field name
    """

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def created_by(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            ForeignKey("users.id"),
            nullable=False,
            index=True,
            comment="User who created (and owns) the record",
        )

    @declared_attr
    def custom_fields(cls) -> Mapped[Dict[str, Any]]:
        return mapped_column(
            JSONType,
            nullable=False,
            default=dict,
            comment="Custom field values keyed by field name",
        )


class ArchiveMixin:
    """Columns for entities that can be archived before cleanup."""

    @declared_attr
    def archived_at(cls) -> Mapped[Optional[datetime]]:
        return mapped_column(DateTime(timezone=True), nullable=True, index=True)

    @declared_attr
    def archive_reason(cls) -> Mapped[Optional[str]]:
        return mapped_column(String(50), nullable=True)


class NoteMixin:
    """
    Free text notes attached to one entity row.

    Subclasses set ``__entity_table__``; notes are removed with the entity.
    """

    __entity_table__: ClassVar[str]

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def entity_id(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            ForeignKey(f"{cls.__entity_table__}.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def text(cls) -> Mapped[str]:
        return mapped_column(Text, nullable=False)

    @declared_attr
    def action(cls) -> Mapped[Optional[str]]:
        return mapped_column(String(255), nullable=True)

    @declared_attr
    def about_references(cls) -> Mapped[Optional[list]]:
        return mapped_column(JSONType, nullable=True)

    @declared_attr
    def created_by(cls) -> Mapped[Optional[int]]:
        return mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
        )


class HistoryMixin:
    """
    Append-only audit entries for one entity type.

    ``entity_id`` intentionally has no foreign key: a DELETE entry must stay
    readable after the entity row is gone.
    """

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def entity_id(cls) -> Mapped[int]:
        return mapped_column(Integer, nullable=False, index=True)

    @declared_attr
    def action(cls) -> Mapped[str]:
        return mapped_column(String(50), nullable=False)

    @declared_attr
    def details(cls) -> Mapped[Optional[Dict[str, Any]]]:
        return mapped_column(JSONType, nullable=True)

    @declared_attr
    def performed_by(cls) -> Mapped[Optional[int]]:
        return mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def performed_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            index=True,
        )
