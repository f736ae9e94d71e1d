"""Security utilities for JWT and password handling."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.core.exceptions import (
    ExpiredCredentialException,
    MalformedCredentialException,
    SigningException,
)
from app.core.permissions import Identity, Role

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(
    identity: Identity,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token for an identity.

    Args:
        identity: Account the token is issued for
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token

    Raises:
        SigningException: If no signing key is configured
    """
    if not settings.jwt_secret_key:
        raise SigningException()

    issued_at = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.access_token_expire_hours)

    to_encode: dict[str, Any] = {
        "sub": str(identity.account_id),
        "email": identity.email,
        "role": identity.role.value,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        # Distinguishes two tokens issued within the same second
        "jti": uuid.uuid4().hex,
        "type": "access",
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> Identity:
    """
    Verify signature and expiry of an access token and extract its identity.

    Args:
        token: JWT token to decode

    Returns:
        Identity carried by the token

    Raises:
        ExpiredCredentialException: If the token is past its expiry
        MalformedCredentialException: If signature or claims are invalid
    """
    if not settings.jwt_secret_key:
        raise SigningException()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except ExpiredSignatureError:
        raise ExpiredCredentialException()
    except JWTError:
        raise MalformedCredentialException()

    if payload.get("type") != "access":
        raise MalformedCredentialException()

    email = payload.get("email")
    if not isinstance(email, str) or not email:
        raise MalformedCredentialException()

    try:
        account_id = int(payload["sub"])
        role = Role(payload["role"])
    except (KeyError, TypeError, ValueError):
        raise MalformedCredentialException()

    return Identity(account_id=account_id, email=email, role=role)
