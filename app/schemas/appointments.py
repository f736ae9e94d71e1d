"""Appointment schemas for request/response validation."""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, Field, model_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    REQUESTED = "en_attente_secretaire"
    PENDING_DOCTOR = "en_attente_docteur"
    ACCEPTED = "accepte"
    REFUSED = "refuse"
    CANCELLED = "annule"


class AppointmentRequest(BaseModel):
    """Patient appointment request."""

    date: dt.date
    heure: str = Field(..., pattern=TIME_PATTERN, description="Time as HH:MM")
    symptomes: str | None = Field(None, max_length=2000)


class AppointmentSchedule(AppointmentRequest):
    """Secretary-created appointment with a doctor already chosen."""

    patient_id: int = Field(..., gt=0)
    docteur_id: int = Field(..., gt=0)


class DoctorAssignment(BaseModel):
    """Assign a doctor to a requested appointment, optionally rescheduling it."""

    docteur_id: int = Field(..., gt=0)
    date: dt.date | None = None
    heure: str | None = Field(None, pattern=TIME_PATTERN)


class AppointmentEdit(BaseModel):
    """Secretary correction of an appointment. Any subset of fields."""

    date: dt.date | None = None
    heure: str | None = Field(None, pattern=TIME_PATTERN)
    docteur_id: int | None = Field(None, gt=0)
    statut: AppointmentStatus | None = None

    @model_validator(mode="after")
    def require_a_change(self) -> "AppointmentEdit":
        """Reject an empty edit."""
        if not self.model_fields_set or all(
            getattr(self, name) is None for name in self.model_fields_set
        ):
            raise ValueError("At least one of date, heure, docteur_id, statut is required")
        return self


class PersonSummary(BaseModel):
    """Name card of the patient or doctor on an appointment."""

    id: int
    nom: str
    prenom: str


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: int
    date: dt.date
    heure: str
    statut: AppointmentStatus
    symptomes: str | None = None
    patient_id: int
    docteur_id: int | None = None
    created_at: dt.datetime
    updated_at: dt.datetime
    # Filled on list views only
    patient: PersonSummary | None = None
    docteur: PersonSummary | None = None

    model_config = {"from_attributes": True}


class AppointmentHistoryEntry(BaseModel):
    """One recorded status change."""

    from_statut: AppointmentStatus | None
    to_statut: AppointmentStatus
    action: str
    actor_role: str
    actor_id: int
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class AppointmentStatistics(BaseModel):
    """Counters shown on the secretary dashboard."""

    total_rendez_vous: int
    en_attente_secretaire: int
    en_attente_docteur: int
    acceptes: int
    refuses: int
    annules: int
    total_patients: int
    total_docteurs: int
    docteurs_libres: int
    docteurs_occupes: int
