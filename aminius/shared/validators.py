"""Shared validation utilities"""

import re
from datetime import date, datetime, time
from typing import Iterable, Optional, Union

from ..errors import ValidationError

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])(?::([0-5][0-9]))?$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def is_valid_uuid(value) -> bool:
    """Canonical 8-4-4-4-12 hex UUID with a known version and RFC 4122 variant"""
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def validate_uuid(value, name: str = "ID") -> str:
    """Raise a 400 naming the entity when ``value`` is not a valid UUID"""
    if not is_valid_uuid(value):
        raise ValidationError(f"Invalid {name} UUID format", "INVALID_UUID")
    return value.lower()


def is_valid_time(value) -> bool:
    return isinstance(value, str) and bool(TIME_PATTERN.match(value))


def parse_time(value: Union[str, time, None], field: str = "time") -> Optional[time]:
    """
    Parse HH:MM or HH:MM:SS (24-hour).

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if value is None or isinstance(value, time):
        return value
    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid {field} format. Use HH:MM or HH:MM:SS")
    hours, minutes, seconds = match.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


def parse_date(value: Union[str, date, None], field: str = "date") -> Optional[date]:
    """
    Parse an ISO YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the value is malformed or not a real date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError(f"Invalid {field} format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid {field}: {value} is not a calendar date") from None


def parse_date_param(value: Optional[str], field: str) -> Optional[date]:
    """parse_date for query strings: empty means absent, bad input is a 400"""
    if not value:
        return None
    try:
        return parse_date(value, field)
    except ValueError as e:
        raise ValidationError(str(e), "INVALID_DATE") from None


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data: dict, fields: Iterable[str]) -> None:
    """Raise a 400 listing every required field that is missing or empty"""
    missing = [f for f in fields if is_blank(data.get(f))]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            "MISSING_REQUIRED_FIELDS",
            missingFields=missing,
        )


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to digits with an optional leading +.

    Raises:
        ValueError: If the number does not have 7-15 digits
    """
    if not phone:
        return phone

    phone = phone.strip()
    prefix = "+" if phone.startswith("+") else ""
    digits = re.sub(r"[\s\-().]", "", phone.lstrip("+"))
    if not digits.isdigit() or not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain 7 to 15 digits")
    return prefix + digits


def validate_choice(value: Optional[str], choices: Iterable[str], field: str) -> Optional[str]:
    """Raise ValueError naming the valid values when ``value`` is not one of ``choices``"""
    choices = tuple(choices)
    if value is not None and value not in choices:
        raise ValueError(f"Invalid {field}. Valid values are: {', '.join(choices)}")
    return value
