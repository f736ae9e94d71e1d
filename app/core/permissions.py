"""Roles, resolved identities and role-based authorization."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from app.core.exceptions import AuthenticationException, AuthorizationException


class Role(str, Enum):
    """Account roles. Fixed at account creation."""

    ADMIN = "admin"
    PATIENT = "patient"
    DOCTOR = "docteur"
    SECRETARY = "secretaire"


@dataclass(frozen=True)
class Identity:
    """Caller identity resolved from a validated credential."""

    account_id: int
    email: str
    role: Role


def authorize(identity: Identity | None, allowed_roles: Iterable[Role]) -> Identity:
    """
    Check that an authenticated identity holds one of the allowed roles.

    Roles are compared as enum members; there is no hierarchy between them.

    Args:
        identity: Resolved identity, or None when the caller is anonymous
        allowed_roles: Roles accepted by the operation

    Returns:
        The same identity

    Raises:
        AuthenticationException: If identity is None
        AuthorizationException: If identity.role is not allowed
        TypeError: If allowed_roles contains something other than a Role
    """
    allowed = frozenset(allowed_roles)
    for role in allowed:
        if not isinstance(role, Role):
            raise TypeError(f"allowed_roles must contain Role members, got {role!r}")

    if identity is None:
        raise AuthenticationException("User not authenticated")

    if identity.role not in allowed:
        required = " or ".join(sorted(role.value for role in allowed))
        raise AuthorizationException(f"Access denied. Required role: {required}")

    return identity
