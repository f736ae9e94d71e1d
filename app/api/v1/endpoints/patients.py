"""Patient-facing endpoints."""

from fastapi import APIRouter

from app.dependencies import DatabaseSession, PatientIdentity
from app.schemas.accounts import DoctorDirectory
from app.schemas.common import ApiResponse
from app.services.account_service import AccountService

router = APIRouter(prefix="/patient", tags=["Patients"])


@router.get(
    "/doctors",
    response_model=ApiResponse[DoctorDirectory],
    summary="Doctor directory with availability",
)
async def doctor_directory(
    db: DatabaseSession,
    patient: PatientIdentity,
) -> ApiResponse[DoctorDirectory]:
    """
    List doctors, free ones first, with free and busy counts.

    Args:
        db: Database session
        patient: Authenticated patient

    Returns:
        Doctor directory
    """
    directory = await AccountService(db).doctor_directory()
    return ApiResponse(data=DoctorDirectory.model_validate(directory))
