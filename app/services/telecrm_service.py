"""
TeleCRM Lead Service
Creates CRM leads for new appointments through the TeleCRM auto-update API
"""

import logging
from typing import Any, Optional

import httpx

from ..config import (
    TELECRM_API_TOKEN,
    TELECRM_API_URL,
    TELECRM_ENTERPRISE_ID,
    TELECRM_LEAD_SOURCE,
    TELECRM_MAX_ATTEMPTS,
    TELECRM_TIMEOUT_SECONDS,
)
from .crm_field_mapper import (
    ServiceNameMapper,
    default_service_mapper,
    format_appointment_datetime,
    format_phone_number,
)

logger = logging.getLogger(__name__)


class TeleCrmError(Exception):
    """TeleCRM rejected the request or could not be reached"""


class TeleCrmService:
    """Service for pushing appointment leads to TeleCRM"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        enterprise_id: Optional[str] = None,
        api_token: Optional[str] = None,
        lead_source: Optional[str] = None,
        timeout: float = TELECRM_TIMEOUT_SECONDS,
        max_attempts: int = TELECRM_MAX_ATTEMPTS,
        service_mapper: Optional[ServiceNameMapper] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or TELECRM_API_URL).rstrip("/")
        self.enterprise_id = enterprise_id if enterprise_id is not None else TELECRM_ENTERPRISE_ID
        self.api_token = api_token if api_token is not None else TELECRM_API_TOKEN
        self.lead_source = lead_source or TELECRM_LEAD_SOURCE
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.service_mapper = service_mapper or default_service_mapper
        self.transport = transport

    @property
    def lead_url(self) -> str:
        return f"{self.api_url}/enterprise/{self.enterprise_id}/autoupdatelead"

    def configuration_error(self) -> Optional[str]:
        if not self.api_token or not self.api_token.strip():
            return "TeleCRM API token not configured"
        if not self.enterprise_id or not self.enterprise_id.strip():
            return "TeleCRM Enterprise ID not configured"
        return None

    def build_lead_payload(self, appointment) -> dict[str, Any]:
        """Build the TeleCRM lead payload for an appointment"""
        fields: dict[str, Any] = {
            "name": appointment.full_name,
            "phone": format_phone_number(appointment.phone),
            "email": appointment.email,
            "appointment_date_and_time": format_appointment_datetime(
                appointment.preferred_date, appointment.preferred_time
            ),
            "lead_source": self.lead_source,
        }

        if appointment.message and appointment.message.strip():
            fields["note"] = appointment.message.strip()

        client_concerns = self.service_mapper.map(appointment.service)
        if client_concerns:
            fields["client_concerns"] = client_concerns

        return {"fields": fields}

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        """POST the payload, retrying transport failures only"""
        headers = {"Authorization": f"Bearer {self.api_token}"}
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    return await client.post(self.lead_url, json=payload, headers=headers)
                except httpx.TransportError as e:
                    last_error = e
                    logger.warning(
                        f"⚠️ TeleCRM request failed (attempt {attempt}/{self.max_attempts}): {e}"
                    )

        raise TeleCrmError(f"TeleCRM unreachable: {last_error}") from last_error

    async def create_lead(self, appointment) -> dict[str, Any]:
        """
        Create a lead in TeleCRM from an appointment.

        Returns:
            {"success": False, "error": ...} when TeleCRM is not configured,
            otherwise {"success": True, "status_code": ..., "data": ...}

        Raises:
            TeleCrmError: On non-2xx responses or when TeleCRM cannot be reached
        """
        logger.info(f"🔵 TeleCRM createLead called for appointment {appointment.appointment_number}")

        config_error = self.configuration_error()
        if config_error:
            logger.error(f"❌ {config_error}")
            return {"success": False, "error": config_error}

        payload = self.build_lead_payload(appointment)
        response = await self._post(payload)

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(f"❌ TeleCRM lead creation failed: {response.status_code}")
            raise TeleCrmError(
                f"TeleCRM API returned status {response.status_code}: {response.text[:300]}"
            )

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = response.text

        logger.info(f"✅ TeleCRM lead created successfully for: {appointment.full_name}")
        return {"success": True, "status_code": response.status_code, "data": data}
