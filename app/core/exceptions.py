"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationException(AppException):
    """Malformed or missing input."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class InvalidTransitionException(AppException):
    """Appointment is not in the state the requested action expects."""

    def __init__(self, message: str = "Invalid status transition"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class AuthenticationException(AppException):
    """Missing, invalid, expired or revoked credential."""

    def __init__(self, message: str = "Could not validate credentials"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ExpiredCredentialException(AuthenticationException):
    """Credential is past its expiry."""

    def __init__(self, message: str = "Token expired"):
        super().__init__(message)


class MalformedCredentialException(AuthenticationException):
    """Credential signature or structure is invalid."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class RevokedCredentialException(AuthenticationException):
    """Credential is no longer the live session for its account."""

    def __init__(self, message: str = "Session expired, please log in again"):
        super().__init__(message)


class AuthorizationException(AppException):
    """Authenticated caller lacks the required role."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class AlreadyCancelledException(ConflictException):
    """Appointment is already cancelled."""

    def __init__(self, message: str = "Appointment is already cancelled"):
        super().__init__(message)


class InternalException(AppException):
    """Store or signing failure; details are not shown to the caller."""

    def __init__(self, message: str = "Internal server error"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)


class SigningException(InternalException):
    """Signing key is unavailable."""

    def __init__(self, message: str = "Signing key is not configured"):
        super().__init__(message)
