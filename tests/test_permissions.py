"""Tests for role-based authorization."""

import pytest

from app.core.exceptions import AuthenticationException, AuthorizationException
from app.core.permissions import Identity, Role, authorize
from app.dependencies import require_roles


def make_identity(role: Role) -> Identity:
    return Identity(account_id=1, email="someone@clinic.example.com", role=role)


def test_allowed_role_passes_through():
    identity = make_identity(Role.SECRETARY)
    assert authorize(identity, {Role.SECRETARY}) is identity


def test_anonymous_is_unauthenticated():
    with pytest.raises(AuthenticationException) as exc_info:
        authorize(None, {Role.PATIENT})
    assert exc_info.value.status_code == 401


@pytest.mark.parametrize("role", [Role.PATIENT, Role.DOCTOR, Role.SECRETARY])
def test_admin_only_operations_reject_other_roles(role):
    with pytest.raises(AuthorizationException) as exc_info:
        authorize(make_identity(role), {Role.ADMIN})
    assert exc_info.value.status_code == 403


def test_admin_has_no_implicit_access():
    with pytest.raises(AuthorizationException):
        authorize(make_identity(Role.ADMIN), {Role.SECRETARY})


def test_raw_strings_are_rejected():
    with pytest.raises(TypeError):
        authorize(make_identity(Role.PATIENT), {"patient"})


def test_require_roles_rejects_strings_early():
    with pytest.raises(TypeError):
        require_roles("admin")
