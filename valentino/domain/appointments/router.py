"""Appointment router - FastAPI endpoints for booking and the admin dashboard"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import (
    SERVICE_TYPES,
    AppointmentCreate,
    AppointmentCreatedResponse,
    AppointmentResponse,
    AppointmentStatusUpdate,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(request: Request, db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db, request.app.state.email_sender)


@router.post("", response_model=AppointmentCreatedResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Public booking endpoint"""
    appointment = await service.create_appointment(data)
    return {
        "message": "Appointment created successfully",
        "appointment": AppointmentResponse.model_validate(appointment),
    }


@router.get("/service-types", response_model=list[str])
async def get_service_types():
    """Service choices shown on the booking form"""
    return SERVICE_TYPES


@router.get("", response_model=list[AppointmentResponse], dependencies=[Depends(require_admin)])
async def get_appointments(service: AppointmentService = Depends(get_appointment_service)):
    """Get all appointments (admin only)"""
    return service.get_appointments()


@router.put("/{appointment_id}", dependencies=[Depends(require_admin)])
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update appointment status (admin only)"""
    return service.update_status(appointment_id, data.status)


@router.delete("/{appointment_id}", dependencies=[Depends(require_admin)])
async def delete_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete appointment (admin only)"""
    return service.delete_appointment(appointment_id)
