"""Appointment repository - Database operations for appointments"""

from sqlalchemy.orm import Session

from ...models import Appointment


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        """Insert a new appointment"""
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def get_appointments(db: Session) -> list[Appointment]:
        """Get all appointments, newest first"""
        return (
            db.query(Appointment)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .all()
        )

    @staticmethod
    def update_status(db: Session, appointment_id: int, status: str) -> int:
        """Set the status of one appointment. Returns rows affected."""
        count = (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id)
            .update({Appointment.status: status}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def delete_appointment(db: Session, appointment_id: int) -> int:
        """Delete one appointment. Returns rows affected."""
        count = (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return count
