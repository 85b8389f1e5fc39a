from __future__ import annotations

import unittest
from datetime import date, datetime

from app.domain.appointments.exceptions import InvalidBookingRequest
from app.domain.appointments.validator import (
    INVALID_TIME_ERROR,
    OUTSIDE_HOURS_ERROR,
    PAST_DATE_ERROR,
    PAST_TIME_ERROR,
    validate_booking_request,
)

NOW = datetime(2026, 3, 10, 14, 30)


def _request(**overrides: str) -> dict[str, str]:
    data = {
        "fullName": "Priya Sharma",
        "email": "priya@example.com",
        "phone": "9876543210",
        "preferredDate": "2026-03-12",
        "preferredTime": "10:00",
        "service": "Teeth Whitening",
        "message": "",
    }
    data.update(overrides)
    return data


class BookingValidatorTests(unittest.TestCase):
    def _errors(self, **overrides: str) -> list[str]:
        with self.assertRaises(InvalidBookingRequest) as ctx:
            validate_booking_request(_request(**overrides), now=NOW)
        return ctx.exception.errors

    def test_valid_request_is_normalized(self) -> None:
        booking = validate_booking_request(
            _request(fullName="  Priya Sharma ", email=" Priya@Example.COM", preferredTime="9:05"),
            now=NOW,
        )

        self.assertEqual(booking.full_name, "Priya Sharma")
        self.assertEqual(booking.email, "priya@example.com")
        self.assertEqual(booking.preferred_date, date(2026, 3, 12))
        self.assertEqual(booking.preferred_time, "09:05")

    def test_iso_timestamp_date_uses_calendar_day(self) -> None:
        booking = validate_booking_request(
            _request(preferredDate="2026-03-12T00:00:00.000Z"), now=NOW
        )
        self.assertEqual(booking.preferred_date, date(2026, 3, 12))

    def test_missing_fields_are_listed_together(self) -> None:
        errors = self._errors(phone="", service="   ")
        self.assertIn("Please provide all required fields: phone, service", errors)

    def test_opening_hour_boundaries(self) -> None:
        for accepted in ("09:00", "21:59"):
            with self.subTest(time=accepted):
                booking = validate_booking_request(_request(preferredTime=accepted), now=NOW)
                self.assertEqual(booking.preferred_time, accepted)

        for rejected in ("08:59", "22:00"):
            with self.subTest(time=rejected):
                self.assertEqual(self._errors(preferredTime=rejected), [OUTSIDE_HOURS_ERROR])

    def test_past_date_is_rejected(self) -> None:
        self.assertEqual(self._errors(preferredDate="2026-03-09"), [PAST_DATE_ERROR])

    def test_same_day_time_before_now_is_rejected(self) -> None:
        self.assertEqual(
            self._errors(preferredDate="2026-03-10", preferredTime="14:00"), [PAST_TIME_ERROR]
        )

    def test_current_minute_is_already_past(self) -> None:
        with self.assertRaises(InvalidBookingRequest) as ctx:
            validate_booking_request(
                _request(preferredDate="2026-03-10", preferredTime="14:30"),
                now=datetime(2026, 3, 10, 14, 30, 15),
            )
        self.assertEqual(ctx.exception.errors, [PAST_TIME_ERROR])

    def test_same_day_time_after_now_is_accepted(self) -> None:
        booking = validate_booking_request(
            _request(preferredDate="2026-03-10", preferredTime="15:00"), now=NOW
        )
        self.assertEqual(booking.preferred_time, "15:00")

    def test_malformed_time_is_rejected(self) -> None:
        self.assertEqual(self._errors(preferredTime="10am"), [INVALID_TIME_ERROR])

    def test_invalid_email_and_long_name_are_both_reported(self) -> None:
        errors = self._errors(email="not-an-email", fullName="x" * 101)

        self.assertIn("Please provide a valid email address", errors)
        self.assertIn("Full name cannot exceed 100 characters", errors)

    def test_impossible_calendar_date_is_rejected(self) -> None:
        errors = self._errors(preferredDate="2026-02-30")
        self.assertEqual(len(errors), 1)
        self.assertIn("valid date", errors[0])


if __name__ == "__main__":
    unittest.main()
