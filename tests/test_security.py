"""Tests for credentials, the session registry and the auth service."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import redis
from jose import jwt

from app.config import settings
from app.core.exceptions import (
    AuthorizationException,
    ExpiredCredentialException,
    InternalException,
    MalformedCredentialException,
    RevokedCredentialException,
    SigningException,
)
from app.core.permissions import Identity, Role
from app.core.redis_client import SessionRegistry
from app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from app.services.auth_service import AuthService


@pytest.fixture
def auth_service(fake_redis) -> AuthService:
    return AuthService(SessionRegistry(fake_redis))


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_access_token_carries_identity():
    identity = Identity(account_id=7, email="doc@clinic.example.com", role=Role.DOCTOR)
    token = create_access_token(identity)

    assert decode_access_token(token) == identity

    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "7"
    assert claims["role"] == "docteur"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_tokens_issued_together_differ():
    identity = Identity(account_id=1, email="a@b.example.com", role=Role.PATIENT)
    assert create_access_token(identity) != create_access_token(identity)


def test_expired_token_rejected():
    identity = Identity(account_id=1, email="a@b.example.com", role=Role.PATIENT)
    token = create_access_token(identity, expires_delta=timedelta(seconds=-10))

    with pytest.raises(ExpiredCredentialException):
        decode_access_token(token)


def test_token_signed_with_other_key_rejected():
    token = jwt.encode(
        {
            "sub": "1",
            "email": "a@b.example.com",
            "role": "patient",
            "type": "access",
            "exp": 9999999999,
        },
        "another-key",
        algorithm="HS256",
    )
    with pytest.raises(MalformedCredentialException):
        decode_access_token(token)


def test_unknown_role_is_malformed():
    token = jwt.encode(
        {
            "sub": "1",
            "email": "a@b.example.com",
            "role": "nurse",
            "type": "access",
            "exp": 9999999999,
        },
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(MalformedCredentialException):
        decode_access_token(token)


def test_garbage_token_is_malformed():
    with pytest.raises(MalformedCredentialException):
        decode_access_token("not.a.jwt")


def test_missing_signing_key(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret_key", "")
    identity = Identity(account_id=1, email="a@b.example.com", role=Role.PATIENT)

    with pytest.raises(SigningException) as exc_info:
        create_access_token(identity)
    assert exc_info.value.status_code == 500


def test_registry_store_sets_ttl():
    mock_redis = MagicMock()
    registry = SessionRegistry(redis_client=mock_redis, ttl=60)

    registry.store(Role.SECRETARY, 3, "token-value")

    mock_redis.set.assert_called_once_with("session:secretaire:3", "token-value", ex=60)


def test_registry_keys_are_per_role():
    assert SessionRegistry.key(Role.PATIENT, 1) != SessionRegistry.key(Role.DOCTOR, 1)


def test_registry_decodes_bytes():
    mock_redis = MagicMock()
    mock_redis.get.return_value = b"abc"
    registry = SessionRegistry(redis_client=mock_redis)

    assert registry.current(Role.PATIENT, 1) == "abc"
    assert registry.is_current(Role.PATIENT, 1, "abc")
    assert not registry.is_current(Role.PATIENT, 1, "abd")


def test_registry_revoke_deletes_key():
    mock_redis = MagicMock()
    registry = SessionRegistry(redis_client=mock_redis)

    registry.revoke(Role.ADMIN, 1)

    mock_redis.delete.assert_called_once_with("session:admin:1")


def test_registry_store_failure_is_internal():
    mock_redis = MagicMock()
    mock_redis.get.side_effect = redis.ConnectionError("down")
    registry = SessionRegistry(redis_client=mock_redis)

    with pytest.raises(InternalException):
        registry.current(Role.PATIENT, 1)


def test_issue_then_validate(auth_service):
    token = auth_service.issue(5, "p@x.example.com", Role.PATIENT)

    identity = auth_service.validate(token)

    assert identity == Identity(account_id=5, email="p@x.example.com", role=Role.PATIENT)


def test_second_issue_displaces_first(auth_service):
    first = auth_service.issue(5, "p@x.example.com", Role.PATIENT)
    second = auth_service.issue(5, "p@x.example.com", Role.PATIENT)

    with pytest.raises(RevokedCredentialException):
        auth_service.validate(first)
    assert auth_service.validate(second).account_id == 5


def test_same_id_in_other_role_is_independent(auth_service):
    patient_token = auth_service.issue(1, "p@x.example.com", Role.PATIENT)
    auth_service.issue(1, "d@x.example.com", Role.DOCTOR)

    assert auth_service.validate(patient_token).role is Role.PATIENT


def test_revoke_is_idempotent(auth_service):
    token = auth_service.issue(2, "s@x.example.com", Role.SECRETARY)

    auth_service.revoke(Role.SECRETARY, 2)
    auth_service.revoke(Role.SECRETARY, 2)

    with pytest.raises(RevokedCredentialException):
        auth_service.validate(token)


def test_logout_keeps_newer_session(auth_service):
    old = auth_service.issue(9, "p@x.example.com", Role.PATIENT)
    new = auth_service.issue(9, "p@x.example.com", Role.PATIENT)

    assert auth_service.logout(Role.PATIENT, old) is False
    assert auth_service.validate(new).account_id == 9

    assert auth_service.logout(Role.PATIENT, new) is True
    assert auth_service.logout(Role.PATIENT, new) is False


def test_logout_with_wrong_role(auth_service):
    token = auth_service.issue(9, "p@x.example.com", Role.PATIENT)

    with pytest.raises(AuthorizationException):
        auth_service.logout(Role.DOCTOR, token)
