"""Appointment repository - Database operations for appointments"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Appointment
from .exceptions import DuplicateAppointmentNumber

# Public sort keys mapped to columns; prefix with "-" for descending
SORT_FIELDS = {
    "createdAt": Appointment.created_at,
    "preferredDate": Appointment.preferred_date,
    "appointmentNumber": Appointment.appointment_number,
    "fullName": Appointment.full_name,
}


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def count_appointments(db: Session) -> int:
        return db.query(func.count(Appointment.id)).scalar() or 0

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: str) -> Optional[Appointment]:
        """Get a specific appointment by ID"""
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def get_appointment_by_number(db: Session, appointment_number: str) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.appointment_number == appointment_number)
            .first()
        )

    @staticmethod
    def insert_appointment(db: Session, appointment_number: str, **appointment_data) -> Appointment:
        """
        Insert a new appointment under the given number.

        Raises:
            DuplicateAppointmentNumber: If the number is already taken
        """
        appointment = Appointment(appointment_number=appointment_number, **appointment_data)
        db.add(appointment)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if AppointmentRepository.get_appointment_by_number(db, appointment_number):
                raise DuplicateAppointmentNumber(appointment_number) from e
            raise

        db.refresh(appointment)
        return appointment

    @staticmethod
    def list_appointments(
        db: Session,
        sort: str = "-createdAt",
        offset: int = 0,
        limit: int = 10,
        email: Optional[str] = None,
        service: Optional[str] = None,
    ) -> tuple[list[Appointment], int]:
        """
        List appointments with filters and pagination.
        Returns (appointments, total_matching)
        """
        descending = sort.startswith("-")
        column = SORT_FIELDS.get(sort.lstrip("-"))
        if column is None:
            raise ValueError(f"Unsupported sort field: {sort}")

        query = db.query(Appointment)

        if email:
            query = query.filter(Appointment.email == email.strip().lower())

        if service:
            query = query.filter(Appointment.service.ilike(f"%{service.strip()}%"))

        total = query.count()
        order = column.desc() if descending else column.asc()
        appointments = query.order_by(order).offset(offset).limit(limit).all()
        return appointments, total

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        """Delete an appointment"""
        db.delete(appointment)
        db.commit()
