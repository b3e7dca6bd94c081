"""
Custom field definition request schemas.

Flags are ``StrictBool``: ``"true"`` or ``1`` is rejected rather than coerced.
"""

from typing import Any, Optional

from pydantic import Field, StrictBool, field_validator, model_validator

from ats.database.models.custom_field import EntityType, FieldType
from ats.schemas.common import CamelModel
from ats.services.custom_fields.values import parse_field_value

FIELD_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"


def _clean_options(options: Optional[list[Any]]) -> Optional[list[str]]:
    if options is None:
        return None
    cleaned = []
    for option in options:
        if not isinstance(option, str) or not option.strip():
            raise ValueError("Options must be non-empty strings")
        cleaned.append(option.strip())
    return cleaned


class CustomFieldCreate(CamelModel):
    """Schema for defining a custom field."""

    entity_type: EntityType = Field(..., description="Entity type slug, e.g. 'jobs'")
    field_name: str = Field(
        ...,
        description="Key used in custom_fields documents",
        max_length=100,
        pattern=FIELD_NAME_PATTERN,
    )
    field_label: str = Field(..., description="Display label", min_length=1, max_length=255)
    field_type: FieldType = Field(..., description="Value type")
    is_required: StrictBool = False
    is_hidden: StrictBool = False
    sort_order: int = Field(0, description="Display position")
    options: Optional[list[Any]] = Field(None, description="Choices for select/radio")
    placeholder: Optional[str] = Field(None, max_length=255)
    default_value: Optional[Any] = None
    lookup_type: Optional[str] = Field(None, max_length=50)

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: Optional[list[Any]]) -> Optional[list[str]]:
        return _clean_options(v)

    @model_validator(mode="after")
    def check_flags_and_options(self) -> "CustomFieldCreate":
        if self.is_required and self.is_hidden:
            raise ValueError("A field cannot be both required and hidden")
        if self.field_type.has_options and not self.options:
            raise ValueError(
                f"Fields of type {self.field_type.value} need at least one option"
            )
        if self.default_value is not None:
            try:
                self.default_value = parse_field_value(
                    self.field_type, self.default_value, self.options
                ).value
            except ValueError as e:
                raise ValueError(f"Invalid default value: {e}") from e
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "entityType": "jobs",
                "fieldName": "priority",
                "fieldLabel": "Priority",
                "fieldType": "select",
                "options": ["Low", "High"],
            }
        }
    }


class CustomFieldUpdate(CamelModel):
    """
    Schema for a partial update of a custom field.

    ``entityType`` and ``fieldName`` identify the field and cannot change.
    """

    field_label: Optional[str] = Field(None, min_length=1, max_length=255)
    field_type: Optional[FieldType] = None
    is_required: Optional[StrictBool] = None
    is_hidden: Optional[StrictBool] = None
    sort_order: Optional[int] = None
    options: Optional[list[Any]] = None
    placeholder: Optional[str] = Field(None, max_length=255)
    default_value: Optional[Any] = None
    lookup_type: Optional[str] = Field(None, max_length=50)

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: Optional[list[Any]]) -> Optional[list[str]]:
        return _clean_options(v)

    @model_validator(mode="after")
    def check_flags(self) -> "CustomFieldUpdate":
        if self.is_required and self.is_hidden:
            raise ValueError("A field cannot be both required and hidden")
        for name in ("field_label", "field_type", "is_required", "is_hidden", "sort_order"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self
