"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

# Choices offered by the booking form; service_type itself stays free-form
SERVICE_TYPES = [
    "Free Quote/Consultation",
    "Tree Removal",
    "Tree Trimming",
    "Stump Grinding",
    "Emergency Tree Service",
    "Tree Health Assessment",
    "Other",
]


class AppointmentCreate(BaseModel):
    """Schema for a public booking request. Required fields are checked by the service."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service_type: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    address: Optional[str] = None
    message: Optional[str] = None

    class Config:
        # Booking forms may post phone numbers and similar fields as JSON numbers
        coerce_numbers_to_str = True


class AppointmentStatusUpdate(BaseModel):
    status: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    name: str
    email: str
    phone: str
    service_type: str
    date: str
    time: str
    address: str
    message: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppointmentCreatedResponse(BaseModel):
    message: str
    appointment: AppointmentResponse
