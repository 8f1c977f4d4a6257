"""Appointment service - Business logic for appointment booking"""

import logging

from sqlalchemy.orm import Session

from ...database import storage_errors
from ...email_service import EmailSender
from ...errors import DeliveryError, NotFound, ValidationError
from ...models import APPOINTMENT_STATUSES, Appointment
from ...shared.validators import missing_fields
from .repository import AppointmentRepository
from .schemas import AppointmentCreate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "phone", "service_type", "date", "time", "address")


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session, email_sender: EmailSender):
        self.db = db
        self.email_sender = email_sender
        self.repo = AppointmentRepository()

    async def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """Persist a booking request, then notify the client and the owner"""
        missing = missing_fields(data, REQUIRED_FIELDS)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        with storage_errors(self.db, "Failed to create appointment"):
            appointment = self.repo.create_appointment(
                self.db,
                name=data.name,
                email=data.email,
                phone=data.phone,
                service_type=data.service_type,
                date=data.date,
                time=data.time,
                address=data.address,
                message=data.message or None,
                status="pending",
            )
        logger.info(f"📥 Appointment {appointment.id} created for {appointment.service_type}")

        await self._notify(appointment)
        return appointment

    async def _notify(self, appointment: Appointment) -> None:
        # Delivery problems never undo a saved appointment
        try:
            await self.email_sender.send_client_confirmation(appointment)
        except DeliveryError as e:
            logger.error(f"Client confirmation failed for appointment {appointment.id}: {e}")
        try:
            await self.email_sender.send_owner_notification(appointment)
        except DeliveryError as e:
            logger.error(f"Owner notification failed for appointment {appointment.id}: {e}")

    def get_appointments(self) -> list[Appointment]:
        with storage_errors(self.db, "Failed to fetch appointments"):
            return self.repo.get_appointments(self.db)

    def update_status(self, appointment_id: int, status: str | None) -> dict:
        if not status:
            raise ValidationError("Status is required")
        if status not in APPOINTMENT_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}")

        with storage_errors(self.db, "Failed to update appointment"):
            count = self.repo.update_status(self.db, appointment_id, status)
        if count == 0:
            raise NotFound("Appointment not found")

        logger.info(f"Appointment {appointment_id} marked {status}")
        return {"message": "Appointment updated successfully"}

    def delete_appointment(self, appointment_id: int) -> dict:
        with storage_errors(self.db, "Failed to delete appointment"):
            count = self.repo.delete_appointment(self.db, appointment_id)
        if count == 0:
            raise NotFound("Appointment not found")
        return {"message": "Appointment deleted successfully"}
