from __future__ import annotations

import asyncio
import time
import unittest
from datetime import date, datetime
from unittest import mock

from app import email_service
from app.domain.appointments.schemas import AppointmentSnapshot
from app.services.notification_service import (
    NotificationFanout,
    OperatorEmailChannel,
    PatientEmailChannel,
)
from app.email_templates import (
    appointment_confirmation_template,
    appointment_confirmation_text,
    format_long_date,
    format_time_12h,
    new_appointment_admin_template,
    new_appointment_admin_text,
)


def _snapshot(**overrides) -> AppointmentSnapshot:
    data = {
        "id": "4b7c1c5e-0000-0000-0000-000000000001",
        "appointment_number": "APT-000042",
        "full_name": "Priya Sharma",
        "email": "priya@example.com",
        "phone": "9876543210",
        "preferred_date": date(2026, 3, 12),
        "preferred_time": "18:30",
        "service": "Teeth Whitening",
        "message": "",
        "created_at": datetime(2026, 3, 10, 8, 0),
    }
    data.update(overrides)
    return AppointmentSnapshot(**data)


class TemplateFormattingTests(unittest.TestCase):
    def test_long_date_and_twelve_hour_time(self) -> None:
        self.assertEqual(format_long_date(date(2026, 3, 12)), "Thursday, March 12, 2026")
        self.assertEqual(format_time_12h("18:30"), "6:30 PM")
        self.assertEqual(format_time_12h("09:00"), "9:00 AM")

    def test_patient_confirmation_contains_booking_details(self) -> None:
        mjml = appointment_confirmation_template(_snapshot())

        self.assertIn("<mjml>", mjml)
        self.assertIn("APT-000042", mjml)
        self.assertIn("Thursday, March 12, 2026", mjml)
        self.assertIn("Teeth Whitening", mjml)
        self.assertNotIn("Message:", mjml)

    def test_user_text_is_escaped(self) -> None:
        mjml = appointment_confirmation_template(
            _snapshot(full_name="<script>x</script>", message="line one\nline <two>")
        )

        self.assertNotIn("<script>", mjml)
        self.assertIn("&lt;script&gt;", mjml)
        self.assertIn("line one<br>line &lt;two&gt;", mjml)

    def test_operator_notice_includes_submission_and_action(self) -> None:
        snapshot = _snapshot(message="Sensitive teeth")
        mjml = new_appointment_admin_template(snapshot)
        text = new_appointment_admin_text(snapshot)

        self.assertIn("Action Required", mjml)
        self.assertIn("Submitted", mjml)
        self.assertIn("Message: Sensitive teeth", text)
        self.assertIn("Submitted: 10 Mar 2026, 08:00 AM", text)

    def test_plain_text_confirmation(self) -> None:
        text = appointment_confirmation_text(_snapshot())

        self.assertTrue(text.startswith("Hello Priya Sharma,"))
        self.assertIn("- Appointment Number: APT-000042", text)
        self.assertIn("- Preferred Time: 6:30 PM", text)


class EmailServiceTests(unittest.IsolatedAsyncioTestCase):
    async def test_confirmation_subject_and_recipient(self) -> None:
        calls: list[dict] = []

        async def fake_send_email(**kwargs) -> dict:
            calls.append(kwargs)
            return {"id": "email-1"}

        with mock.patch.object(email_service, "send_email", fake_send_email):
            await email_service.send_appointment_confirmation(_snapshot())

        self.assertEqual(calls[0]["to"], "priya@example.com")
        self.assertEqual(calls[0]["subject"], "Appointment Confirmation - APT-000042")

    async def test_admin_notice_defaults_to_operator_inbox(self) -> None:
        calls: list[dict] = []

        async def fake_send_email(**kwargs) -> dict:
            calls.append(kwargs)
            return {"id": "email-2"}

        with mock.patch.object(email_service, "send_email", fake_send_email), mock.patch.object(
            email_service, "ADMIN_EMAIL", None
        ), mock.patch.object(
            email_service, "EMAIL_FROM_ADDRESS", "Clinic <noreply@clinic.test>"
        ):
            await email_service.send_appointment_admin_notification(_snapshot())

        self.assertEqual(calls[0]["to"], "noreply@clinic.test")
        self.assertEqual(calls[0]["subject"], "New Appointment Request - APT-000042")

    async def test_missing_transport_raises(self) -> None:
        with mock.patch.object(email_service, "SMTP_HOST", None), mock.patch.object(
            email_service, "RESEND_API_KEY", None
        ), mock.patch.object(email_service, "compile_mjml_to_html", lambda content: "<html/>"):
            with self.assertLogs("app.email_service", level="ERROR"):
                with self.assertRaises(email_service.EmailDeliveryError):
                    await email_service.send_email(
                        to="priya@example.com", subject="Hi", mjml_content="<mjml/>"
                    )

    async def test_slow_smtp_does_not_serialize_email_channels(self) -> None:
        delay = 0.5
        recipients: list[list[str]] = []

        def slow_smtp(to, subject, html_content, text_content, from_address) -> dict:
            time.sleep(delay)
            recipients.append(to)
            return {"id": "smtp-1", "success": True}

        max_gap = 0.0
        done = asyncio.Event()

        async def ticker() -> None:
            nonlocal max_gap
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.01)
                now = time.monotonic()
                max_gap = max(max_gap, now - last)
                last = now

        fanout = NotificationFanout(
            [PatientEmailChannel(), OperatorEmailChannel(operator_email="front-desk@example.com")]
        )

        with mock.patch.object(email_service, "SMTP_HOST", "smtp.clinic.test"), mock.patch.object(
            email_service, "send_via_smtp", slow_smtp
        ), mock.patch.object(email_service, "compile_mjml_to_html", lambda content: "<html/>"):
            ticking = asyncio.create_task(ticker())
            started = time.monotonic()
            results = await fanout.dispatch(_snapshot())
            elapsed = time.monotonic() - started
            done.set()
            await ticking

        self.assertTrue(all(r["success"] for r in results))
        self.assertEqual(len(recipients), 2)
        self.assertLess(elapsed, delay * 1.8)
        self.assertLess(max_gap, delay / 2)

    def test_smtp_send_returns_timestamped_id(self) -> None:
        with mock.patch.object(email_service, "SMTP_HOST", "smtp.clinic.test"), mock.patch.object(
            email_service, "SMTP_PORT", 587
        ), mock.patch.object(email_service, "SMTP_USE_TLS", False), mock.patch.object(
            email_service, "SMTP_USERNAME", None
        ), mock.patch.object(email_service.smtplib, "SMTP") as smtp:
            with self.assertLogs("app.email_service", level="INFO"):
                result = email_service.send_via_smtp(
                    ["priya@example.com"], "Hi", "<p>Hi</p>", "Hi", "Clinic <noreply@clinic.test>"
                )

        self.assertTrue(result["success"])
        self.assertTrue(result["id"].startswith("smtp-"))
        smtp.return_value.sendmail.assert_called_once()
        self.assertEqual(smtp.return_value.sendmail.call_args[0][0], "noreply@clinic.test")


if __name__ == "__main__":
    unittest.main()
