"""Authentication service: credentials bound to a single live session."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    RevokedCredentialException,
)
from app.core.permissions import Identity, Role
from app.core.redis_client import SessionRegistry
from app.core.security import create_access_token, decode_access_token, verify_password
from app.services.account_service import AccountService, to_profile

logger = structlog.get_logger()


class AuthService:
    """Authentication service for issuing, validating and revoking credentials."""

    def __init__(self, registry: SessionRegistry):
        """Initialize auth service with the session registry."""
        self.registry = registry

    def issue(self, account_id: int, email: str, role: Role) -> str:
        """
        Issue a credential and make it the account's only live session.

        Any previously issued credential for the same account stops
        validating as soon as this returns.

        Args:
            account_id: Account identifier within its role partition
            email: Account email, carried as a claim
            role: Account role

        Returns:
            Signed access token
        """
        token = create_access_token(Identity(account_id=account_id, email=email, role=role))
        self.registry.store(role, account_id, token)
        logger.info("session_issued", role=role.value, account_id=account_id)
        return token

    def validate(self, token: str) -> Identity:
        """
        Validate a credential against its signature, expiry and the registry.

        Raises:
            ExpiredCredentialException: If the token is past its expiry
            MalformedCredentialException: If the token cannot be trusted
            RevokedCredentialException: If the token is not the live session
        """
        identity = decode_access_token(token)

        if not self.registry.is_current(identity.role, identity.account_id, token):
            raise RevokedCredentialException()

        return identity

    def revoke(self, role: Role, account_id: int) -> None:
        """Revoke the account's live session. Idempotent."""
        self.registry.revoke(role, account_id)
        logger.info("session_revoked", role=role.value, account_id=account_id)

    async def login(self, db: AsyncSession, role: Role, email: str, password: str) -> dict:
        """
        Authenticate an account of the given role and open a new session.

        Returns:
            Dict with the account profile under ``user`` and the ``token``

        Raises:
            AuthenticationException: If email or password is wrong
        """
        account = await AccountService(db).get_by_email(role, email)

        if account is None or not verify_password(password, account["password_hash"]):
            logger.info("login_failed", role=role.value)
            raise AuthenticationException("Invalid email or password")

        token = self.issue(account["id"], account["email"], role)
        return {"user": to_profile(role, account), "token": token}

    def logout(self, role: Role, token: str) -> bool:
        """
        End the session a credential belongs to.

        A credential that was already revoked or displaced by a newer login
        is accepted without touching the newer session.

        Returns:
            True if a live session was revoked, False if there was none

        Raises:
            AuthorizationException: If the credential belongs to another role
        """
        identity = decode_access_token(token)

        if identity.role is not role:
            raise AuthorizationException(f"Access denied. Required role: {role.value}")

        if not self.registry.is_current(identity.role, identity.account_id, token):
            return False

        self.revoke(identity.role, identity.account_id)
        return True
