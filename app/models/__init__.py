"""Database models."""

from app.models.admins import admins
from app.models.appointment_history import appointment_status_history
from app.models.appointments import appointments
from app.models.base import metadata
from app.models.doctors import doctors
from app.models.patients import patients
from app.models.secretaries import secretaries

__all__ = [
    "admins",
    "appointment_status_history",
    "appointments",
    "doctors",
    "metadata",
    "patients",
    "secretaries",
]
