"""
Tests for typed custom field value validation.
"""

import pytest

from ats.database.models.custom_field import FieldType
from ats.services.custom_fields.values import FieldValue, is_blank, parse_field_value


class TestAcceptedValues:
    """Values that are valid for their type, with their stored form."""

    @pytest.mark.parametrize(
        "field_type,value,expected",
        [
            (FieldType.TEXT, "hello", "hello"),
            (FieldType.TEXTAREA, "line one\nline two", "line one\nline two"),
            (FieldType.NUMBER, 12, 12),
            (FieldType.NUMBER, -3.5, -3.5),
            (FieldType.CURRENCY, 1500.25, 1500.25),
            (FieldType.PERCENTAGE, 100, 100),
            (FieldType.CHECKBOX, True, True),
            (FieldType.DATE, "2024-03-01", "2024-03-01"),
            (FieldType.EMAIL, "jane@example.com", "jane@example.com"),
            (FieldType.PHONE, "+1 (555) 123-4567", "+1 (555) 123-4567"),
            (FieldType.URL, "https://acme.example/jobs", "https://acme.example/jobs"),
            (FieldType.LOOKUP, 17, 17),
            (FieldType.FILE, "resume.pdf", "resume.pdf"),
        ],
    )
    def test_valid(self, field_type, value, expected):
        result = parse_field_value(field_type, value)

        assert isinstance(result, FieldValue)
        assert result.field_type is field_type
        assert result.value == expected

    def test_datetime_is_normalised(self):
        result = parse_field_value("datetime", "2024-03-01T09:30:00Z")
        assert result.value.startswith("2024-03-01T09:30:00")

    def test_select_within_options(self):
        result = parse_field_value(FieldType.SELECT, "High", ["Low", "High"])
        assert result.value == "High"

    def test_none_is_allowed(self):
        assert parse_field_value(FieldType.NUMBER, None).value is None


class TestRejectedValues:
    """Values that do not match their type."""

    @pytest.mark.parametrize(
        "field_type,value",
        [
            (FieldType.NUMBER, "12"),
            (FieldType.CHECKBOX, "yes"),
            (FieldType.CHECKBOX, 1),
            (FieldType.DATE, "01/03/2024"),
            (FieldType.DATE, 1709251200),
            (FieldType.EMAIL, "not-an-email"),
            (FieldType.PHONE, "call me"),
            (FieldType.URL, "acme"),
            (FieldType.TEXT, 42),
            (FieldType.CURRENCY, -1),
            (FieldType.PERCENTAGE, 101),
        ],
    )
    def test_invalid(self, field_type, value):
        with pytest.raises(ValueError):
            parse_field_value(field_type, value)

    def test_select_outside_options(self):
        with pytest.raises(ValueError, match="must be one of: Low, High"):
            parse_field_value(FieldType.RADIO, "Medium", ["Low", "High"])

    def test_unknown_field_type(self):
        with pytest.raises(ValueError):
            parse_field_value("color", "#fff")


@pytest.mark.parametrize(
    "value,blank", [(None, True), ("", True), ("   ", True), ("x", False), (0, False), (False, False)]
)
def test_is_blank(value, blank):
    assert is_blank(value) is blank
