"""
Custom field definition models.

A definition describes one admin-defined attribute of an entity type. Values
themselves live in each entity row's ``custom_fields`` document keyed by
``field_name``.
"""

import enum
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import Base, JSONType, TimestampMixin, utcnow


class EntityType(str, enum.Enum):
    """Entity types that carry custom fields, named by their URL slug."""

    ORGANIZATIONS = "organizations"
    HIRING_MANAGERS = "hiring-managers"
    JOBS = "jobs"
    JOB_SEEKERS = "job-seekers"
    LEADS = "leads"
    TASKS = "tasks"
    PLACEMENTS = "placements"

    @classmethod
    def from_string(cls, value: str) -> "EntityType":
        """
        Convert string to EntityType enum.

        Raises:
            ValueError: If value is not a valid entity type
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Invalid entity type: {value}")


class FieldType(str, enum.Enum):
    """Closed set of custom field types."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATE = "date"
    DATETIME = "datetime"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    URL = "url"
    FILE = "file"
    LOOKUP = "lookup"

    @property
    def has_options(self) -> bool:
        return self in (FieldType.SELECT, FieldType.RADIO)


class CustomFieldDefinition(TimestampMixin, Base):
    """
    Typed attribute definition for one entity type.

    Attributes:
        entity_type: Entity type slug the field belongs to (e.g. "jobs")
        field_name: Key used in ``custom_fields`` documents
        field_type: One of the closed field type set
        is_required: Value must be supplied on create
        is_hidden: Field is not shown; never required at the same time
        sort_order: Display position within the entity type
        options: Ordered choices for select and radio fields
        default_value: Value used when a required field is omitted
    """

    __tablename__ = "custom_field_definitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    field_name: Mapped[str] = mapped_column(String(100), nullable=False)
    field_label: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[str] = mapped_column(String(50), nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    options: Mapped[Optional[list[str]]] = mapped_column(JSONType, nullable=True)
    placeholder: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    default_value: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)
    lookup_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "entity_type", "field_name", name="uq_custom_field_entity_type_name"
        ),
        Index("ix_custom_field_entity_type_sort", "entity_type", "sort_order"),
    )


class CustomFieldDefinitionHistory(Base):
    """
    Audit entry for a custom field definition.

    ``field_definition_id`` has no foreign key so the trail survives deletion.
    """

    __tablename__ = "custom_field_definition_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    field_definition_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    old_values: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    new_values: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    changed_fields: Mapped[Optional[list[str]]] = mapped_column(JSONType, nullable=True)
    performed_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
