"""Authentication schemas."""

from typing import Annotated, Any, Union

from pydantic import BaseModel, Discriminator, EmailStr, Field, Tag

from app.schemas.accounts import AccountResponse, DoctorResponse, PatientResponse


class LoginRequest(BaseModel):
    """Email and password login."""

    email: EmailStr
    mot_de_passe: str = Field(..., min_length=1)


def profile_kind(value: Any) -> str:
    """Pick the profile schema from the account's role."""
    role = value.get("role") if isinstance(value, dict) else getattr(value, "role", None)
    return role if role in ("docteur", "patient") else "staff"


# Doctors and patients carry extra columns; admins and secretaries do not
AccountProfile = Annotated[
    Union[
        Annotated[DoctorResponse, Tag("docteur")],
        Annotated[PatientResponse, Tag("patient")],
        Annotated[AccountResponse, Tag("staff")],
    ],
    Discriminator(profile_kind),
]


class LoginResponse(BaseModel):
    """Login response with token and profile."""

    user: AccountProfile
    token: str
    token_type: str = "bearer"
