"""
Typed validation of custom field values.

Each field type is backed by a pydantic ``TypeAdapter``. Values arrive as
JSON, so the adapters are strict: ``"12"`` is not a number and ``"yes"`` is
not a checkbox value. A validated value is returned as a ``FieldValue``
tagged with its type; its ``value`` is the JSON form stored in the record's
``custom_fields`` document.
"""

from datetime import date, datetime
from typing import Annotated, Any, NamedTuple, Optional, Sequence, Union

from pydantic import (
    AnyHttpUrl,
    EmailStr,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)

from ats.database.models.custom_field import FieldType

PHONE_PATTERN = r"^\+?[0-9()\-.\s]{7,25}$"

Number = Union[StrictInt, StrictFloat]
Phone = Annotated[
    str, StringConstraints(strict=True, strip_whitespace=True, pattern=PHONE_PATTERN)
]

_text = TypeAdapter(StrictStr)
_number = TypeAdapter(Number)
_date = TypeAdapter(date)
_datetime = TypeAdapter(datetime)

_ADAPTERS: dict[FieldType, TypeAdapter] = {
    FieldType.TEXT: _text,
    FieldType.TEXTAREA: _text,
    FieldType.FILE: _text,
    FieldType.SELECT: _text,
    FieldType.RADIO: _text,
    FieldType.EMAIL: TypeAdapter(EmailStr),
    FieldType.PHONE: TypeAdapter(Phone),
    FieldType.NUMBER: _number,
    FieldType.CURRENCY: _number,
    FieldType.PERCENTAGE: _number,
    FieldType.CHECKBOX: TypeAdapter(StrictBool),
    FieldType.URL: TypeAdapter(AnyHttpUrl),
    FieldType.LOOKUP: TypeAdapter(Union[StrictInt, StrictStr]),
}


class FieldValue(NamedTuple):
    """A custom field value that passed validation for its type."""

    field_type: FieldType
    value: Any


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else "invalid value"


def _parse_temporal(adapter: TypeAdapter, value: Any, label: str) -> str:
    # date/datetime adapters accept epoch numbers in lax mode; only ISO strings are allowed
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO {label} string")
    try:
        return adapter.validate_python(value).isoformat()
    except ValidationError as e:
        raise ValueError(_first_error(e)) from e


def parse_field_value(
    field_type: Union[FieldType, str],
    value: Any,
    options: Optional[Sequence[str]] = None,
) -> FieldValue:
    """
    Validate one value against a field type.

    Args:
        field_type: Field type of the definition
        value: Raw JSON value supplied by the caller
        options: Allowed choices for select and radio fields

    Returns:
        The tagged, normalised value

    Raises:
        ValueError: If the value is not valid for the field type
    """
    field_type = FieldType(field_type)

    if value is None:
        return FieldValue(field_type, None)

    if field_type is FieldType.DATE:
        return FieldValue(field_type, _parse_temporal(_date, value, "date"))
    if field_type is FieldType.DATETIME:
        return FieldValue(field_type, _parse_temporal(_datetime, value, "datetime"))

    try:
        parsed = _ADAPTERS[field_type].validate_python(value)
    except ValidationError as e:
        raise ValueError(_first_error(e)) from e

    if field_type.has_options:
        choices = list(options or [])
        if parsed not in choices:
            raise ValueError(f"must be one of: {', '.join(choices)}")
    elif field_type is FieldType.CURRENCY and parsed < 0:
        raise ValueError("must not be negative")
    elif field_type is FieldType.PERCENTAGE and not 0 <= parsed <= 100:
        raise ValueError("must be between 0 and 100")
    elif field_type is FieldType.URL:
        # keep the caller's spelling, the adapter only checks it
        parsed = value

    return FieldValue(field_type, parsed)


def is_blank(value: Any) -> bool:
    """Whether a value counts as missing for a required field."""
    return value is None or (isinstance(value, str) and not value.strip())
