"""Secretary endpoints: request triage, scheduling and corrections."""

from datetime import date

from fastapi import APIRouter, Query, status

from app.dependencies import DatabaseSession, SecretaryIdentity
from app.schemas.accounts import DoctorResponse
from app.schemas.appointments import (
    AppointmentEdit,
    AppointmentHistoryEntry,
    AppointmentResponse,
    AppointmentSchedule,
    AppointmentStatistics,
    AppointmentStatus,
    DoctorAssignment,
)
from app.schemas.common import ApiResponse
from app.services.account_service import AccountService
from app.services.appointment_service import AppointmentService

router = APIRouter(prefix="/secretary", tags=["Secretary"])


@router.get(
    "/requests",
    response_model=ApiResponse[list[AppointmentResponse]],
    summary="Appointment requests waiting for a doctor assignment",
)
async def list_requests(
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[list[AppointmentResponse]]:
    """List appointments in status en_attente_secretaire, oldest request first."""
    items = await AppointmentService(db).list_requests()
    return ApiResponse(data=items)


@router.get(
    "/appointments",
    response_model=ApiResponse[list[AppointmentResponse]],
    summary="List all appointments",
)
async def list_appointments(
    secretary: SecretaryIdentity,
    db: DatabaseSession,
    statut: AppointmentStatus | None = Query(None, description="Filter by status"),
    day: date | None = Query(None, alias="date", description="Filter by day"),
) -> ApiResponse[list[AppointmentResponse]]:
    """
    List every appointment.

    Args:
        secretary: Authenticated secretary
        db: Database session
        statut: Optional status filter
        day: Optional day filter

    Returns:
        Appointments ordered by date then time
    """
    items = await AppointmentService(db).list_all(statut, day)
    return ApiResponse(data=items)


@router.post(
    "/appointments",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Schedule an appointment directly",
)
async def schedule_appointment(
    data: AppointmentSchedule,
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Create an appointment for a patient with a doctor already chosen.

    The appointment goes straight to the doctor for acceptance.
    """
    appointment = await AppointmentService(db).schedule_direct(secretary.account_id, data)
    return ApiResponse(message="Appointment scheduled successfully", data=appointment)


@router.put(
    "/appointments/{appointment_id}/assign",
    response_model=ApiResponse[AppointmentResponse],
    summary="Assign a doctor to a request",
)
async def assign_doctor(
    appointment_id: int,
    data: DoctorAssignment,
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Assign a doctor to a requested appointment.

    Args:
        appointment_id: Appointment waiting for a secretary
        data: Doctor and optional new date and time
        secretary: Authenticated secretary
        db: Database session

    Returns:
        Appointment now waiting for the doctor
    """
    appointment = await AppointmentService(db).assign_doctor(
        appointment_id, secretary.account_id, data
    )
    return ApiResponse(message="Doctor assigned successfully", data=appointment)


@router.put(
    "/appointments/{appointment_id}",
    response_model=ApiResponse[AppointmentResponse],
    summary="Correct an appointment",
)
async def edit_appointment(
    appointment_id: int,
    data: AppointmentEdit,
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Change date, time, doctor or status of an appointment.

    Status changes made here bypass the normal workflow and are recorded
    in the appointment history.
    """
    appointment = await AppointmentService(db).edit(appointment_id, secretary.account_id, data)
    return ApiResponse(message="Appointment updated successfully", data=appointment)


@router.delete(
    "/appointments/{appointment_id}",
    response_model=ApiResponse[AppointmentResponse],
    summary="Cancel any appointment",
)
async def cancel_appointment(
    appointment_id: int,
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Cancel an appointment on behalf of the clinic."""
    appointment = await AppointmentService(db).cancel_by_secretary(
        appointment_id, secretary.account_id
    )
    return ApiResponse(message="Appointment cancelled successfully", data=appointment)


@router.get(
    "/appointments/{appointment_id}/history",
    response_model=ApiResponse[list[AppointmentHistoryEntry]],
    summary="Status history of an appointment",
)
async def appointment_history(
    appointment_id: int,
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[list[AppointmentHistoryEntry]]:
    """List status changes of an appointment, oldest first."""
    entries = await AppointmentService(db).history(appointment_id)
    return ApiResponse(data=entries)


@router.get(
    "/statistics",
    response_model=ApiResponse[AppointmentStatistics],
    summary="Dashboard counters",
)
async def statistics(
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentStatistics]:
    """Count appointments per status, patients, and doctors by availability."""
    stats = await AppointmentService(db).statistics()
    return ApiResponse(data=stats)


@router.get(
    "/doctors",
    response_model=ApiResponse[list[DoctorResponse]],
    summary="Doctors available for assignment",
)
async def list_doctors(
    secretary: SecretaryIdentity,
    db: DatabaseSession,
) -> ApiResponse[list[DoctorResponse]]:
    """List doctors, free ones first."""
    directory = await AccountService(db).doctor_directory()
    return ApiResponse(data=[DoctorResponse.model_validate(d) for d in directory["docteurs"]])
