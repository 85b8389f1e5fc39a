"""Appointment router - FastAPI endpoints for booking intake"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.notification_service import NotificationFanout, build_default_fanout
from .schemas import AppointmentCreate, AppointmentSnapshot, to_appointment_response
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


def get_notification_fanout() -> NotificationFanout:
    """Dependency injection for the notification fanout"""
    return build_default_fanout()


@router.post("", status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    background_tasks: BackgroundTasks,
    service: AppointmentService = Depends(get_appointment_service),
    fanout: NotificationFanout = Depends(get_notification_fanout),
):
    """Book an appointment; notifications go out after the response is sent"""
    appointment = service.create_appointment(data)

    snapshot = AppointmentSnapshot.model_validate(appointment)
    background_tasks.add_task(fanout.dispatch, snapshot)

    return {
        "success": True,
        "message": "Appointment booked successfully",
        "data": {"appointment": to_appointment_response(appointment).model_dump(mode="json")},
    }


@router.get("")
async def list_appointments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: str = Query("-createdAt"),
    email: Optional[str] = Query(None),
    service_name: Optional[str] = Query(None, alias="service"),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments with pagination"""
    result = service.list_appointments(
        page=page, limit=limit, sort=sort, email=email, service=service_name
    )
    return {
        "success": True,
        "count": result["count"],
        "total": result["total"],
        "page": result["page"],
        "pages": result["pages"],
        "data": {
            "appointments": [
                to_appointment_response(a).model_dump(mode="json")
                for a in result["appointments"]
            ]
        },
    }


@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get a single appointment"""
    appointment = service.get_appointment(appointment_id)
    return {
        "success": True,
        "data": {"appointment": to_appointment_response(appointment).model_dump(mode="json")},
    }


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete an appointment"""
    result = service.delete_appointment(appointment_id)
    return {"success": True, "message": result["message"]}
