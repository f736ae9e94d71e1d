"""Appointment endpoints for patients and doctors."""

from fastapi import APIRouter, Query, status

from app.core.permissions import Role
from app.dependencies import DatabaseSession, PatientIdentity, PatientOrDoctorIdentity
from app.schemas.appointments import AppointmentRequest, AppointmentResponse, AppointmentStatus
from app.schemas.common import ApiResponse
from app.services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post(
    "",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Request an appointment",
)
async def request_appointment(
    data: AppointmentRequest,
    patient: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Request an appointment. It waits for a secretary to assign a doctor.

    Args:
        data: Requested date, time and symptoms
        patient: Authenticated patient
        db: Database session

    Returns:
        Created appointment
    """
    service = AppointmentService(db)
    appointment = await service.request_appointment(patient.account_id, data)
    return ApiResponse(message="Appointment requested successfully", data=appointment)


@router.get(
    "/mine",
    response_model=ApiResponse[list[AppointmentResponse]],
    summary="List my appointments",
)
async def list_my_appointments(
    identity: PatientOrDoctorIdentity,
    db: DatabaseSession,
    statut: AppointmentStatus | None = Query(None, description="Filter by status"),
) -> ApiResponse[list[AppointmentResponse]]:
    """
    List the caller's appointments ordered by date then time.

    Patients see the appointments they own, doctors the ones assigned to them.
    """
    service = AppointmentService(db)
    if identity.role is Role.PATIENT:
        items = await service.list_for_patient(identity.account_id, statut)
    else:
        items = await service.list_for_doctor(identity.account_id, statut)
    return ApiResponse(data=items)


@router.delete(
    "/{appointment_id}",
    response_model=ApiResponse[AppointmentResponse],
    summary="Cancel my appointment",
)
async def cancel_appointment(
    appointment_id: int,
    patient: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Cancel one of the caller's appointments.

    Args:
        appointment_id: Appointment to cancel
        patient: Authenticated patient
        db: Database session

    Returns:
        Cancelled appointment
    """
    service = AppointmentService(db)
    appointment = await service.cancel_by_patient(appointment_id, patient.account_id)
    return ApiResponse(message="Appointment cancelled successfully", data=appointment)
