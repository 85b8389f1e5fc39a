"""
Appointment Notification Service
Fans a booked appointment out to the patient, the clinic staff and the CRM.
Each channel is awaited independently; one channel failing never stops the
others and never touches the already-committed booking.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, TypedDict

from ..email_service import (
    get_operator_email,
    send_appointment_admin_notification,
    send_appointment_confirmation,
)
from .telecrm_service import TeleCrmService

logger = logging.getLogger(__name__)


class ChannelResult(TypedDict):
    channel: str
    success: bool
    error: Optional[str]


class NotificationChannel(Protocol):
    name: str

    async def notify(self, appointment) -> dict: ...


class PatientEmailChannel:
    name = "patient_email"

    def __init__(self, send: Optional[Callable[..., Awaitable[dict]]] = None):
        self.send = send or send_appointment_confirmation

    async def notify(self, appointment) -> dict:
        logger.info(f"📧 Sending appointment confirmation to {appointment.email}")
        return await self.send(appointment)


class OperatorEmailChannel:
    name = "operator_email"

    def __init__(
        self,
        send: Optional[Callable[..., Awaitable[dict]]] = None,
        operator_email: Optional[str] = None,
    ):
        self.send = send or send_appointment_admin_notification
        self.operator_email = operator_email or get_operator_email()

    async def notify(self, appointment) -> dict:
        logger.info(f"📧 Sending new appointment notice to {self.operator_email}")
        return await self.send(appointment, to=self.operator_email)


class CrmLeadChannel:
    name = "crm_lead"

    def __init__(self, crm: Optional[TeleCrmService] = None):
        self.crm = crm or TeleCrmService()

    async def notify(self, appointment) -> dict:
        return await self.crm.create_lead(appointment)


class NotificationFanout:
    """Runs every channel concurrently against the same appointment snapshot"""

    def __init__(self, channels: list[NotificationChannel]):
        self.channels = list(channels)

    async def _run_channel(self, channel: NotificationChannel, appointment) -> ChannelResult:
        number = appointment.appointment_number
        try:
            outcome = await channel.notify(appointment)
        except Exception as e:
            logger.error(f"❌ {channel.name} failed for appointment {number}: {e}")
            return {"channel": channel.name, "success": False, "error": str(e)}

        # Channels may report a soft failure instead of raising
        if isinstance(outcome, dict) and outcome.get("success") is False:
            error = str(outcome.get("error") or "Channel reported failure")
            logger.error(f"❌ {channel.name} failed for appointment {number}: {error}")
            return {"channel": channel.name, "success": False, "error": error}

        logger.info(f"✅ {channel.name} succeeded for appointment {number}")
        return {"channel": channel.name, "success": True, "error": None}

    async def dispatch(self, appointment) -> list[ChannelResult]:
        """
        Notify all channels for one appointment.

        Never raises; the per-channel results are returned in channel order.
        """
        results = await asyncio.gather(
            *(self._run_channel(channel, appointment) for channel in self.channels)
        )
        failed = [r["channel"] for r in results if not r["success"]]
        if failed:
            logger.warning(
                f"⚠️ Appointment {appointment.appointment_number} notifications incomplete: "
                f"{', '.join(failed)} failed"
            )
        return list(results)


def build_default_fanout() -> NotificationFanout:
    """Patient email, staff email and CRM lead, wired from config"""
    return NotificationFanout(
        [PatientEmailChannel(), OperatorEmailChannel(), CrmLeadChannel()]
    )
