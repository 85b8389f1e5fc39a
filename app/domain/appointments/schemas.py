"""Appointment domain schemas - Pydantic models for requests, responses and snapshots"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AppointmentCreate(BaseModel):
    """Schema for a public booking request.

    Every field is optional here so that business validation can report all
    missing fields at once instead of failing on the first one.
    """

    fullName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    preferredDate: Optional[str] = None
    preferredTime: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: str
    appointmentNumber: str
    fullName: str
    email: str
    phone: str
    preferredDate: date
    preferredTime: str
    service: str
    message: Optional[str] = None
    createdAt: Optional[datetime] = None


class AppointmentSnapshot(BaseModel):
    """Immutable copy of a persisted appointment handed to notification channels"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    appointment_number: str
    full_name: str
    email: str
    phone: str
    preferred_date: date
    preferred_time: str
    service: str
    message: Optional[str] = None
    created_at: Optional[datetime] = None


def to_appointment_response(appointment) -> AppointmentResponse:
    """Shape an Appointment row (or snapshot) for the public API"""
    return AppointmentResponse(
        id=appointment.id,
        appointmentNumber=appointment.appointment_number,
        fullName=appointment.full_name,
        email=appointment.email,
        phone=appointment.phone,
        preferredDate=appointment.preferred_date,
        preferredTime=appointment.preferred_time,
        service=appointment.service,
        message=appointment.message,
        createdAt=appointment.created_at,
    )
