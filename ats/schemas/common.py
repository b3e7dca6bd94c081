"""
Shared schema bases and the note and bulk update request schemas.

Request bodies use camelCase keys (``customFields``, ``firstName``); the
snake_case column names are accepted as well. Unknown keys are dropped,
which also discards attempts to set ``id``, ``createdBy`` or timestamps.
"""

from typing import Any, ClassVar, Mapping, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ats.core.errors import InvalidArgumentError, validation_message


class CamelModel(BaseModel):
    """Base schema accepting camelCase or snake_case keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        """Treat empty form values as null."""
        if isinstance(data, dict):
            return {
                key: (None if isinstance(value, str) and not value.strip() else value)
                for key, value in data.items()
            }
        return data


class RecordPayload(CamelModel):
    """
    Base for entity create and update payloads.

    Subclasses list their NOT NULL columns in ``__non_nullable__`` so an
    explicit null is rejected here rather than by the database.
    """

    __non_nullable__: ClassVar[tuple[str, ...]] = ()

    custom_fields: Optional[dict[str, Any]] = Field(
        None,
        description="Custom field values keyed by field name",
    )

    @model_validator(mode="after")
    def check_non_nullable(self) -> "RecordPayload":
        for name in self.__non_nullable__:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class NoteCreate(CamelModel):
    """Schema for adding a note to a record."""

    text: str = Field(
        ...,
        description="Note body",
        min_length=1,
    )
    action: Optional[str] = Field(
        None,
        description="Structured tag such as 'Call' or 'Email'",
        max_length=255,
    )
    about_references: Optional[list[Any]] = Field(
        None,
        description="Records the note is about",
    )
    notify: list[EmailStr] = Field(
        default_factory=list,
        description="Addresses emailed about the new note",
    )

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Note text cannot be empty")
        return cleaned


class BulkUpdateRequest(CamelModel):
    """Schema for applying one change set to many records."""

    ids: list[int] = Field(
        ...,
        description="IDs of the records to update",
        min_length=1,
    )
    updates: dict[str, Any] = Field(
        ...,
        description="Changes applied to every record",
    )


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(schema: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate a raw payload against a schema.

    Raises:
        InvalidArgumentError: With a message naming each failing field
    """
    if isinstance(data, schema):
        return data
    if not isinstance(data, Mapping):
        raise InvalidArgumentError("Request body must be a JSON object")
    try:
        return schema.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidArgumentError(
            validation_message(e.errors()),
            fields=[".".join(str(part) for part in error["loc"]) for error in e.errors()],
        ) from e
