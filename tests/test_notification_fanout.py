from __future__ import annotations

import asyncio
import unittest
from datetime import date, datetime
from typing import Any

from app.domain.appointments.schemas import AppointmentSnapshot
from app.services.notification_service import (
    CrmLeadChannel,
    NotificationFanout,
    OperatorEmailChannel,
    PatientEmailChannel,
)


def _snapshot() -> AppointmentSnapshot:
    return AppointmentSnapshot(
        id="4b7c1c5e-0000-0000-0000-000000000001",
        appointment_number="APT-000042",
        full_name="Priya Sharma",
        email="priya@example.com",
        phone="9876543210",
        preferred_date=date(2026, 3, 12),
        preferred_time="10:00",
        service="Teeth Whitening",
        message="",
        created_at=datetime(2026, 3, 10, 8, 0),
    )


class RecordingChannel:
    def __init__(self, name: str, outcome: Any = None, error: Exception | None = None) -> None:
        self.name = name
        self.outcome = outcome if outcome is not None else {"success": True}
        self.error = error
        self.calls: list[AppointmentSnapshot] = []

    async def notify(self, appointment: AppointmentSnapshot) -> Any:
        self.calls.append(appointment)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.outcome


class NotificationFanoutTests(unittest.IsolatedAsyncioTestCase):
    async def test_failing_channel_does_not_stop_the_others(self) -> None:
        patient = RecordingChannel("patient_email")
        operator = RecordingChannel("operator_email", error=RuntimeError("SMTP down"))
        crm = RecordingChannel("crm_lead")
        snapshot = _snapshot()

        with self.assertLogs("app.services.notification_service", level="ERROR"):
            results = await NotificationFanout([patient, operator, crm]).dispatch(snapshot)

        self.assertEqual(
            results,
            [
                {"channel": "patient_email", "success": True, "error": None},
                {"channel": "operator_email", "success": False, "error": "SMTP down"},
                {"channel": "crm_lead", "success": True, "error": None},
            ],
        )
        for channel in (patient, operator, crm):
            self.assertEqual(channel.calls, [snapshot])

    async def test_soft_failure_outcome_is_recorded(self) -> None:
        crm = RecordingChannel(
            "crm_lead", outcome={"success": False, "error": "TeleCRM API token not configured"}
        )

        with self.assertLogs("app.services.notification_service", level="ERROR"):
            results = await NotificationFanout([crm]).dispatch(_snapshot())

        self.assertEqual(
            results,
            [{"channel": "crm_lead", "success": False, "error": "TeleCRM API token not configured"}],
        )

    async def test_channels_run_concurrently(self) -> None:
        started: list[str] = []
        release = asyncio.Event()

        class BlockingChannel:
            def __init__(self, name: str) -> None:
                self.name = name

            async def notify(self, appointment: AppointmentSnapshot) -> dict:
                started.append(self.name)
                await release.wait()
                return {"success": True}

        async def release_when_all_started() -> None:
            while len(started) < 2:
                await asyncio.sleep(0)
            release.set()

        fanout = NotificationFanout([BlockingChannel("a"), BlockingChannel("b")])
        results, _ = await asyncio.wait_for(
            asyncio.gather(fanout.dispatch(_snapshot()), release_when_all_started()), timeout=1
        )

        self.assertEqual(sorted(started), ["a", "b"])
        self.assertTrue(all(r["success"] for r in results))


class ChannelAdapterTests(unittest.IsolatedAsyncioTestCase):
    async def test_patient_channel_sends_to_patient(self) -> None:
        sent: list[AppointmentSnapshot] = []

        async def fake_send(appointment: AppointmentSnapshot) -> dict:
            sent.append(appointment)
            return {"id": "email-1"}

        snapshot = _snapshot()
        await PatientEmailChannel(send=fake_send).notify(snapshot)
        self.assertEqual(sent, [snapshot])

    async def test_operator_channel_uses_configured_inbox(self) -> None:
        recipients: list[str] = []

        async def fake_send(appointment: AppointmentSnapshot, to: str) -> dict:
            recipients.append(to)
            return {"id": "email-2"}

        channel = OperatorEmailChannel(send=fake_send, operator_email="front-desk@example.com")
        await channel.notify(_snapshot())
        self.assertEqual(recipients, ["front-desk@example.com"])

    async def test_crm_channel_delegates_to_client(self) -> None:
        class FakeCrm:
            def __init__(self) -> None:
                self.leads: list[str] = []

            async def create_lead(self, appointment: AppointmentSnapshot) -> dict:
                self.leads.append(appointment.appointment_number)
                return {"success": True, "status_code": 200, "data": {}}

        crm = FakeCrm()
        outcome = await CrmLeadChannel(crm=crm).notify(_snapshot())

        self.assertEqual(crm.leads, ["APT-000042"])
        self.assertTrue(outcome["success"])


if __name__ == "__main__":
    unittest.main()
