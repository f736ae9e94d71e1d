"""Admin-only endpoints for staff account management."""

from fastapi import APIRouter, status

from app.core.permissions import Role
from app.dependencies import AdminIdentity, AuthServiceDep, DatabaseSession
from app.schemas.accounts import AccountCreate, AccountResponse, DoctorCreate, DoctorResponse
from app.schemas.common import ApiResponse
from app.services.account_service import AccountService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/doctors",
    response_model=ApiResponse[DoctorResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a doctor account (admin only)",
)
async def create_doctor(
    data: DoctorCreate,
    db: DatabaseSession,
    admin: AdminIdentity,
) -> ApiResponse[DoctorResponse]:
    """
    Create a doctor account. The doctor starts as free.

    Args:
        data: Doctor details
        db: Database session
        admin: Authenticated administrator

    Returns:
        Created doctor profile
    """
    doctor = await AccountService(db).create_doctor(data)
    return ApiResponse(
        message="Doctor created successfully",
        data=DoctorResponse.model_validate(doctor),
    )


@router.post(
    "/secretaries",
    response_model=ApiResponse[AccountResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a secretary account (admin only)",
)
async def create_secretary(
    data: AccountCreate,
    db: DatabaseSession,
    admin: AdminIdentity,
) -> ApiResponse[AccountResponse]:
    """Create a secretary account."""
    secretary = await AccountService(db).create_secretary(data)
    return ApiResponse(
        message="Secretary created successfully",
        data=AccountResponse.model_validate(secretary),
    )


@router.get(
    "/doctors",
    response_model=ApiResponse[list[DoctorResponse]],
    summary="List doctors (admin only)",
)
async def list_doctors(
    db: DatabaseSession,
    admin: AdminIdentity,
) -> ApiResponse[list[DoctorResponse]]:
    """List every doctor account."""
    doctors = await AccountService(db).list_accounts(Role.DOCTOR)
    return ApiResponse(data=[DoctorResponse.model_validate(d) for d in doctors])


@router.get(
    "/secretaries",
    response_model=ApiResponse[list[AccountResponse]],
    summary="List secretaries (admin only)",
)
async def list_secretaries(
    db: DatabaseSession,
    admin: AdminIdentity,
) -> ApiResponse[list[AccountResponse]]:
    """List every secretary account."""
    secretaries = await AccountService(db).list_accounts(Role.SECRETARY)
    return ApiResponse(data=[AccountResponse.model_validate(s) for s in secretaries])


@router.delete(
    "/doctors/{doctor_id}",
    response_model=ApiResponse[dict],
    summary="Delete a doctor (admin only)",
)
async def delete_doctor(
    doctor_id: int,
    db: DatabaseSession,
    admin: AdminIdentity,
    auth_service: AuthServiceDep,
) -> ApiResponse[dict]:
    """
    Delete a doctor account.

    Appointments waiting on, accepted or refused by the doctor go back to
    the secretary queue. The doctor's session is revoked.

    Args:
        doctor_id: Doctor to delete
        db: Database session
        admin: Authenticated administrator
        auth_service: Auth service

    Returns:
        Number of appointments sent back to the secretary queue
    """
    requeued = await AccountService(db).delete_doctor(doctor_id, admin.account_id)
    auth_service.revoke(Role.DOCTOR, doctor_id)
    return ApiResponse(
        message="Doctor deleted successfully",
        data={"rendez_vous_reassignes": requeued},
    )


@router.delete(
    "/secretaries/{secretary_id}",
    response_model=ApiResponse[None],
    summary="Delete a secretary (admin only)",
)
async def delete_secretary(
    secretary_id: int,
    db: DatabaseSession,
    admin: AdminIdentity,
    auth_service: AuthServiceDep,
) -> ApiResponse[None]:
    """Delete a secretary account and revoke its session."""
    await AccountService(db).delete_secretary(secretary_id)
    auth_service.revoke(Role.SECRETARY, secretary_id)
    return ApiResponse(message="Secretary deleted successfully")
