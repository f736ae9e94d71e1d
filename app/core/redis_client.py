"""Redis client configuration and the session registry."""

import secrets
from typing import cast

import redis

from app.config import settings
from app.core.exceptions import InternalException
from app.core.permissions import Role

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client instance.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """
    Check if Redis connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        client = get_redis_client()
        client.ping()
        return True
    except Exception:
        return False


def close_redis_connection() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class SessionRegistry:
    """
    Redis-backed map of account to its single live credential.

    Keys are ``session:{role}:{account_id}`` because account ids are only
    unique inside a role partition. Every mutation is a single Redis
    command, so overwrite and revoke are atomic per account.
    """

    KEY_PREFIX = "session"

    def __init__(self, redis_client: redis.Redis, ttl: int | None = None):
        """Initialize registry with Redis client and entry lifetime in seconds."""
        self.redis = redis_client
        self.ttl = ttl if ttl is not None else settings.session_ttl_seconds

    @classmethod
    def key(cls, role: Role, account_id: int) -> str:
        """Generate registry key for an account."""
        return f"{cls.KEY_PREFIX}:{role.value}:{account_id}"

    def store(self, role: Role, account_id: int, token: str) -> None:
        """Make token the live credential, replacing any previous one."""
        try:
            self.redis.set(self.key(role, account_id), token, ex=self.ttl)
        except redis.RedisError as e:
            raise InternalException("Session store unavailable") from e

    def current(self, role: Role, account_id: int) -> str | None:
        """Get the live credential for an account, if any."""
        try:
            value = self.redis.get(self.key(role, account_id))
        except redis.RedisError as e:
            raise InternalException("Session store unavailable") from e

        if isinstance(value, bytes):
            return value.decode()
        return cast(str | None, value)

    def is_current(self, role: Role, account_id: int, token: str) -> bool:
        """Check that token is byte-for-byte the live credential."""
        stored = self.current(role, account_id)
        if stored is None:
            return False
        return secrets.compare_digest(stored.encode(), token.encode())

    def revoke(self, role: Role, account_id: int) -> None:
        """Remove the live credential. Revoking an absent session is a no-op."""
        try:
            self.redis.delete(self.key(role, account_id))
        except redis.RedisError as e:
            raise InternalException("Session store unavailable") from e
