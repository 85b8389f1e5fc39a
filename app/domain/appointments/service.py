"""Appointment service - Business logic for the booking intake pipeline"""

import logging
import math
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import APPOINTMENT_NUMBER_MAX_ATTEMPTS
from ...models import Appointment
from .exceptions import AllocationConflict, IdentifierConflict
from .repository import AppointmentRepository
from .schemas import AppointmentCreate
from .sequence import SequenceAllocator
from .validator import ValidatedBooking, validate_booking_request

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        db: Session,
        allocator: Optional[SequenceAllocator] = None,
        max_attempts: int = APPOINTMENT_NUMBER_MAX_ATTEMPTS,
    ):
        self.db = db
        self.repo = AppointmentRepository()
        self.allocator = allocator or SequenceAllocator()
        self.max_attempts = max(1, max_attempts)

    def create_appointment(self, data: AppointmentCreate, now: Optional[datetime] = None) -> Appointment:
        """
        Validate and persist a booking request.

        Raises:
            InvalidBookingRequest: If any business rule is violated (nothing is stored)
            AllocationConflict: If no unique appointment number could be claimed
        """
        booking = validate_booking_request(data.model_dump(), now=now)
        logger.info(f"📥 Creating appointment for {booking.email} on {booking.preferred_date}")
        appointment = self._persist(booking)
        logger.info(f"✅ Appointment {appointment.appointment_number} created (ID: {appointment.id})")
        return appointment

    def _persist(self, booking: ValidatedBooking) -> Appointment:
        """Reserve a number and insert, retrying on identifier conflicts"""
        for attempt in range(1, self.max_attempts + 1):
            try:
                sequence = self.allocator.reserve(self.db)
                appointment_number = self.allocator.format_number(sequence)
                return self.repo.insert_appointment(
                    self.db, appointment_number, **booking.as_record()
                )
            except IdentifierConflict as e:
                logger.warning(
                    f"⚠️ Appointment number conflict (attempt {attempt}/{self.max_attempts}): {e}"
                )

        logger.error(f"❌ Appointment number allocation exhausted after {self.max_attempts} attempts")
        raise AllocationConflict(self.max_attempts)

    def get_appointment(self, appointment_id: str) -> Appointment:
        """Get a specific appointment"""
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def list_appointments(
        self,
        page: int = 1,
        limit: int = 10,
        sort: str = "-createdAt",
        email: Optional[str] = None,
        service: Optional[str] = None,
    ) -> dict:
        """Paginated appointment listing"""
        offset = (page - 1) * limit
        try:
            appointments, total = self.repo.list_appointments(
                self.db, sort=sort, offset=offset, limit=limit, email=email, service=service
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        return {
            "appointments": appointments,
            "count": len(appointments),
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 0,
        }

    def delete_appointment(self, appointment_id: str) -> dict:
        """Delete an appointment; its number is never reissued"""
        appointment = self.get_appointment(appointment_id)
        number = appointment.appointment_number
        self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {number} deleted (ID: {appointment_id})")
        return {"message": "Appointment deleted successfully"}
