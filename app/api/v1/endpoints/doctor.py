"""Doctor-facing endpoints."""

from datetime import date

from fastapi import APIRouter, Query

from app.core.exceptions import ValidationException
from app.dependencies import DatabaseSession, DoctorIdentity
from app.schemas.accounts import AvailabilityUpdate, DoctorResponse
from app.schemas.appointments import AppointmentResponse
from app.schemas.common import ApiResponse
from app.services.account_service import AccountService
from app.services.appointment_service import AppointmentService

router = APIRouter(prefix="/doctor", tags=["Doctor"])


@router.put(
    "/appointments/{appointment_id}/accept",
    response_model=ApiResponse[AppointmentResponse],
    summary="Accept an assigned appointment",
)
async def accept_appointment(
    appointment_id: int,
    doctor: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Accept an appointment waiting for the calling doctor.

    Args:
        appointment_id: Appointment to accept
        doctor: Authenticated doctor
        db: Database session

    Returns:
        Accepted appointment
    """
    appointment = await AppointmentService(db).accept(appointment_id, doctor.account_id)
    return ApiResponse(message="Appointment accepted", data=appointment)


@router.put(
    "/appointments/{appointment_id}/refuse",
    response_model=ApiResponse[AppointmentResponse],
    summary="Refuse an assigned appointment",
)
async def refuse_appointment(
    appointment_id: int,
    doctor: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Refuse an appointment waiting for the calling doctor."""
    appointment = await AppointmentService(db).refuse(appointment_id, doctor.account_id)
    return ApiResponse(message="Appointment refused", data=appointment)


@router.put(
    "/availability",
    response_model=ApiResponse[DoctorResponse],
    summary="Set my availability",
)
async def set_availability(
    data: AvailabilityUpdate,
    doctor: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Mark the calling doctor as free (libre) or busy (occupe)."""
    profile = await AccountService(db).set_availability(doctor.account_id, data.statut)
    return ApiResponse(
        message="Availability updated",
        data=DoctorResponse.model_validate(profile),
    )


@router.get(
    "/calendar",
    response_model=ApiResponse[list[AppointmentResponse]],
    summary="My accepted appointments",
)
async def calendar(
    doctor: DoctorIdentity,
    db: DatabaseSession,
    date_debut: date | None = Query(None, description="First day, inclusive"),
    date_fin: date | None = Query(None, description="Last day, inclusive"),
) -> ApiResponse[list[AppointmentResponse]]:
    """
    List the calling doctor's accepted appointments in date order.

    Raises:
        ValidationException: If date_debut is after date_fin
    """
    if date_debut and date_fin and date_debut > date_fin:
        raise ValidationException("date_debut must not be after date_fin")

    items = await AppointmentService(db).calendar(doctor.account_id, date_debut, date_fin)
    return ApiResponse(data=items)
