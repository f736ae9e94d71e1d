"""Account schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, field_validator


class DoctorAvailability(str, Enum):
    """Doctor availability, toggled by the doctor."""

    FREE = "libre"
    BUSY = "occupe"


class AccountBase(BaseModel):
    """Fields common to every account."""

    nom: str = Field(..., min_length=1, max_length=100)
    prenom: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    telephone: str | None = Field(None, max_length=20)

    @field_validator("telephone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        if v is None:
            return v
        # Remove common separators
        cleaned = (
            v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
        )
        if not cleaned.isdigit():
            raise ValueError("Phone number must contain only digits and separators")
        return v


class AccountCreate(AccountBase):
    """Admin and secretary registration payload."""

    mot_de_passe: str = Field(..., min_length=6, max_length=72)


class PatientCreate(AccountCreate):
    """Patient self-registration payload."""

    date_naissance: date | None = None


class DoctorCreate(AccountCreate):
    """Doctor account creation payload (admin only)."""

    specialite: str | None = Field(None, max_length=100)


class AccountResponse(AccountBase):
    """Public account profile. Never carries the password hash."""

    id: int
    role: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PatientResponse(AccountResponse):
    """Patient profile."""

    date_naissance: date | None = None


class DoctorResponse(AccountResponse):
    """Doctor profile including availability."""

    specialite: str | None = None
    statut: DoctorAvailability


class AvailabilityUpdate(BaseModel):
    """Doctor availability toggle."""

    statut: DoctorAvailability


class DoctorDirectory(BaseModel):
    """Doctor list with availability counts."""

    total: int
    libres: int
    occupes: int
    docteurs: list[DoctorResponse]
