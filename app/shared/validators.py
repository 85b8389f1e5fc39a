"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

# 24-hour clock; single-digit hours ("9:30") are accepted
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Trimmed, lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Please provide a valid email address")

    return email


def parse_calendar_date(value: str) -> date:
    """
    Parse a calendar date from an ISO string.

    Accepts plain dates ("2026-03-14") as well as ISO timestamps
    ("2026-03-14T00:00:00.000Z"), in which case only the date part is used.

    Raises:
        ValueError: If the value is not a valid date
    """
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    try:
        return date.fromisoformat(text)
    except ValueError:
        # Fall back to full datetime parsing for "2026-03-14 10:00" style values
        return datetime.fromisoformat(value.strip()).date()


def parse_time_of_day(value: str) -> tuple[int, int]:
    """
    Parse an HH:MM (24-hour) time string.

    Returns:
        (hour, minute)

    Raises:
        ValueError: If the value does not match HH:MM
    """
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Invalid time format. Please use HH:MM format (24-hour)")
    return int(match.group(1)), int(match.group(2))
