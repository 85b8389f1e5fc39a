"""Booking validation - business rules for public appointment requests

Every rule is evaluated and all violations are reported together. A rule is
only skipped when it needs a field that already failed to parse.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ...shared.validators import parse_calendar_date, parse_time_of_day, validate_email
from .exceptions import InvalidBookingRequest

# Clinic operating window, compared against the hour component only
OPENING_HOUR = 9
CLOSING_HOUR = 21

REQUIRED_FIELDS = ("fullName", "email", "phone", "preferredDate", "preferredTime", "service")

MAX_LENGTHS = {
    "fullName": (100, "Full name cannot exceed 100 characters"),
    "phone": (20, "Phone number cannot exceed 20 characters"),
    "service": (200, "Service name cannot exceed 200 characters"),
    "message": (1000, "Message cannot exceed 1000 characters"),
}

PAST_DATE_ERROR = "Preferred date cannot be in the past"
PAST_TIME_ERROR = "Selected time cannot be in the past"
INVALID_DATE_ERROR = "Preferred date must be a valid date (YYYY-MM-DD)"
INVALID_TIME_ERROR = "Invalid time format. Please use HH:MM format (24-hour)"
OUTSIDE_HOURS_ERROR = "Appointments are only available between 9:00 AM and 9:00 PM"


@dataclass(frozen=True)
class ValidatedBooking:
    full_name: str
    email: str
    phone: str
    preferred_date: date
    preferred_time: str
    service: str
    message: str = ""

    def as_record(self) -> dict:
        return asdict(self)


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validate_booking_request(
    data: Mapping[str, Any], now: Optional[datetime] = None
) -> ValidatedBooking:
    """
    Validate a raw booking request and return its normalized form.

    Args:
        data: Request fields keyed by their public (camelCase) names
        now: Reference instant; defaults to the current local time

    Returns:
        ValidatedBooking with trimmed values, lower-cased email and HH:MM time

    Raises:
        InvalidBookingRequest: With every violated rule message
    """
    now = now or datetime.now()
    fields = {name: _clean(data.get(name)) for name in (*REQUIRED_FIELDS, "message")}
    errors: list[str] = []

    # 1. Presence
    missing = [name for name in REQUIRED_FIELDS if not fields[name]]
    if missing:
        errors.append(f"Please provide all required fields: {', '.join(missing)}")

    for name, (limit, error) in MAX_LENGTHS.items():
        if len(fields[name]) > limit:
            errors.append(error)

    email = fields["email"]
    if email:
        try:
            email = validate_email(email)
        except ValueError as e:
            errors.append(str(e))

    # 2. Date is a real calendar date and not before today
    preferred_date = None
    if fields["preferredDate"]:
        try:
            preferred_date = parse_calendar_date(fields["preferredDate"])
        except ValueError:
            errors.append(INVALID_DATE_ERROR)
        else:
            if preferred_date < now.date():
                errors.append(PAST_DATE_ERROR)

    # 3. Time format
    hour = minute = None
    if fields["preferredTime"]:
        try:
            hour, minute = parse_time_of_day(fields["preferredTime"])
        except ValueError:
            errors.append(INVALID_TIME_ERROR)

    if hour is not None:
        # 4. Same-day bookings cannot be in the past
        if preferred_date == now.date():
            requested = datetime.combine(preferred_date, datetime.min.time()).replace(
                hour=hour, minute=minute
            )
            # Compared with seconds intact: the current minute is already past
            if requested < now:
                errors.append(PAST_TIME_ERROR)

        # 5. Operating hours (hour-based; 21:59 is still inside)
        if hour < OPENING_HOUR or hour > CLOSING_HOUR:
            errors.append(OUTSIDE_HOURS_ERROR)

    if errors:
        raise InvalidBookingRequest(errors)

    return ValidatedBooking(
        full_name=fields["fullName"],
        email=email,
        phone=fields["phone"],
        preferred_date=preferred_date,
        preferred_time=f"{hour:02d}:{minute:02d}",
        service=fields["service"],
        message=fields["message"],
    )
