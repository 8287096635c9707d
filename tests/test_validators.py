from datetime import date, time

import pytest

from aminius.errors import ValidationError
from aminius.shared.queries import contains_pattern, escape_like, prefix_pattern
from aminius.shared.validators import (
    is_valid_time,
    is_valid_uuid,
    parse_date,
    parse_date_param,
    parse_time,
    require_fields,
    validate_email,
    validate_phone,
    validate_uuid,
)


@pytest.mark.parametrize(
    "value",
    [
        "3f2504e0-4f89-41d3-9a0c-0305e82c3301",
        "3F2504E0-4F89-41D3-9A0C-0305E82C3301",
        "123e4567-e89b-12d3-a456-426614174000",
    ],
)
def test_valid_uuids_are_accepted(value):
    assert is_valid_uuid(value)


@pytest.mark.parametrize(
    "value",
    [
        "3f2504e0-4f89-41d3-9a0c-0305e82c330",  # too short
        "3f2504e04f89-41d3-9a0c-0305e82c33011",  # misplaced hyphen
        "3f2504e0-4f89-41d3-7a0c-0305e82c3301",  # bad variant
        "3f2504e0-4f89-01d3-9a0c-0305e82c3301",  # version 0
        "not-a-uuid",
        "",
        None,
    ],
)
def test_invalid_uuids_are_rejected(value):
    assert not is_valid_uuid(value)


def test_validate_uuid_names_the_entity():
    with pytest.raises(ValidationError) as exc_info:
        validate_uuid("nope", "Appointment")
    assert exc_info.value.message == "Invalid Appointment UUID format"
    assert exc_info.value.status_code == 400


def test_validate_uuid_lowercases():
    assert validate_uuid("3F2504E0-4F89-41D3-9A0C-0305E82C3301") == "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


@pytest.mark.parametrize("value", ["09:00", "23:59", "00:00:00", "12:30:59"])
def test_valid_times(value):
    assert is_valid_time(value)


@pytest.mark.parametrize("value", ["9:05", "24:00", "12:60", "12:30:60", "1230", "12:3", "noon", ""])
def test_invalid_times(value):
    assert not is_valid_time(value)
    with pytest.raises(ValueError):
        parse_time(value, "startTime")


def test_parse_time_handles_seconds():
    assert parse_time("14:05:09") == time(14, 5, 9)
    assert parse_time("14:05") == time(14, 5)


def test_parse_date_requires_real_calendar_date():
    assert parse_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValueError):
        parse_date("2023-02-29")
    with pytest.raises(ValueError):
        parse_date("01/06/2024")


def test_parse_date_param_treats_empty_as_absent():
    assert parse_date_param("", "startDate") is None
    with pytest.raises(ValidationError):
        parse_date_param("2024-13-01", "startDate")


def test_require_fields_lists_every_missing_field():
    with pytest.raises(ValidationError) as exc_info:
        require_fields({"title": "  ", "clientId": "x", "type": None}, ("clientId", "title", "type"))
    assert exc_info.value.extra["missingFields"] == ["title", "type"]
    assert "title" in exc_info.value.message


def test_email_and_phone_normalisation():
    assert validate_email(" Agent@Example.COM ") == "agent@example.com"
    assert validate_phone("+254 712-345-678") == "+254712345678"
    with pytest.raises(ValueError):
        validate_email("agent@")
    with pytest.raises(ValueError):
        validate_phone("12345")


def test_like_patterns_escape_wildcards():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    assert contains_pattern("  john ") == "%john%"
    assert prefix_pattern("jo_") == "jo\\_%"
