import uuid

from sqlalchemy import Column, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate an opaque identifier for an appointment record"""
    return str(uuid.uuid4())


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    # APT-000123; assigned once at creation and never reassigned
    appointment_number = Column(String(20), unique=True, index=True, nullable=False)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    preferred_date = Column(Date, nullable=False)
    preferred_time = Column(String(5), nullable=False)  # HH:MM, 24-hour
    service = Column(String(200), nullable=False)
    message = Column(Text, nullable=True, default="")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_appointments_email_preferred_date", "email", "preferred_date"),
        Index("ix_appointments_created_at", "created_at"),
    )


class AppointmentSequence(Base):
    """Durable counter backing appointment numbers.

    The value only moves forward, so numbers of deleted appointments are
    never handed out again.
    """

    __tablename__ = "appointment_sequences"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
