"""FastAPI dependencies."""

from collections.abc import Callable
from typing import Annotated

import redis
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationException
from app.core.permissions import Identity, Role, authorize
from app.core.redis_client import SessionRegistry, get_redis_client
from app.database import get_db
from app.services.auth_service import AuthService

# Missing headers are reported by get_bearer_token in the envelope format
security = HTTPBearer(auto_error=False)


def get_auth_service(
    redis_client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> AuthService:
    """Build the auth service over the session registry."""
    return AuthService(SessionRegistry(redis_client))


async def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """
    Extract the raw bearer token from the Authorization header.

    Raises:
        AuthenticationException: If the header is missing or not a bearer token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Missing token")
    return credentials.credentials


async def get_current_identity(
    token: Annotated[str, Depends(get_bearer_token)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Identity:
    """
    Resolve the caller's identity from a live session.

    Raises:
        AuthenticationException: If the token is expired, malformed or revoked
    """
    return auth_service.validate(token)


def require_roles(*roles: Role) -> Callable:
    """
    Build a dependency that admits only the given roles.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency returning the caller's identity
    """
    allowed = frozenset(roles)
    # Fail at import time on a bad role list, not on the first request
    for role in allowed:
        if not isinstance(role, Role):
            raise TypeError(f"Allowed roles must be Role members, got {role!r}")

    async def role_checker(
        identity: Annotated[Identity, Depends(get_current_identity)],
    ) -> Identity:
        return authorize(identity, allowed)

    return role_checker


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[redis.Redis, Depends(get_redis_client)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
BearerToken = Annotated[str, Depends(get_bearer_token)]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
AdminIdentity = Annotated[Identity, Depends(require_roles(Role.ADMIN))]
PatientIdentity = Annotated[Identity, Depends(require_roles(Role.PATIENT))]
DoctorIdentity = Annotated[Identity, Depends(require_roles(Role.DOCTOR))]
SecretaryIdentity = Annotated[Identity, Depends(require_roles(Role.SECRETARY))]
PatientOrDoctorIdentity = Annotated[Identity, Depends(require_roles(Role.PATIENT, Role.DOCTOR))]
