"""Registration, login and logout endpoints."""

from fastapi import APIRouter, status

from app.core.permissions import Role
from app.dependencies import AuthServiceDep, BearerToken, DatabaseSession
from app.schemas.accounts import AccountCreate, AccountResponse, PatientCreate, PatientResponse
from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.common import ApiResponse
from app.services.account_service import AccountService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post(
    "/admin",
    response_model=ApiResponse[AccountResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register the administrator (one time)",
)
async def register_admin(
    data: AccountCreate,
    db: DatabaseSession,
) -> ApiResponse[AccountResponse]:
    """
    Register the system administrator.

    Only the first call succeeds; afterwards admin registration is closed.

    Args:
        data: Administrator details
        db: Database session

    Returns:
        Created administrator profile
    """
    admin = await AccountService(db).register_admin(data)
    return ApiResponse(
        message="Administrator created successfully",
        data=AccountResponse.model_validate(admin),
    )


@router.post(
    "/patient",
    response_model=ApiResponse[PatientResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Patient self-registration",
)
async def register_patient(
    data: PatientCreate,
    db: DatabaseSession,
) -> ApiResponse[PatientResponse]:
    """Create a patient account."""
    patient = await AccountService(db).register_patient(data)
    return ApiResponse(
        message="Patient registered successfully",
        data=PatientResponse.model_validate(patient),
    )


@router.post(
    "/{role}/login",
    response_model=ApiResponse[LoginResponse],
    summary="Log in as an account of the given role",
)
async def login(
    role: Role,
    credentials: LoginRequest,
    db: DatabaseSession,
    auth_service: AuthServiceDep,
) -> ApiResponse[LoginResponse]:
    """
    Authenticate and open a session.

    Any session previously opened by the same account stops working.

    Args:
        role: Role partition to authenticate against
        credentials: Email and password
        db: Database session
        auth_service: Auth service

    Returns:
        Profile and access token
    """
    result = await auth_service.login(db, role, credentials.email, credentials.mot_de_passe)
    return ApiResponse(
        message="Login successful",
        data=LoginResponse(
            user=result["user"],
            token=result["token"],
        ),
    )


@router.post(
    "/{role}/logout",
    response_model=ApiResponse[None],
    summary="Log out",
)
async def logout(
    role: Role,
    token: BearerToken,
    auth_service: AuthServiceDep,
) -> ApiResponse[None]:
    """
    End the caller's session.

    Logging out with a token that was already revoked or replaced still
    succeeds.
    """
    auth_service.logout(role, token)
    return ApiResponse(message="Logout successful")
