"""Authentication-related exceptions."""

from .base import AuthenticationError, ConflictError


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match a user."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code="INVALID_CREDENTIALS")


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, forged, or of the wrong kind."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, error_code="INVALID_TOKEN")


class TokenExpiredError(AuthenticationError):
    """Raised when a token's signature is valid but its lifetime has passed.

    Clients treat ``TOKEN_EXPIRED`` as "refresh and retry".
    """

    def __init__(self, message: str = "Token expired"):
        super().__init__(message=message, error_code="TOKEN_EXPIRED")


class SessionRevokedError(AuthenticationError):
    """Raised when a refresh token has no active session."""

    def __init__(self, message: str = "Session is no longer active"):
        super().__init__(message=message, error_code="SESSION_INACTIVE")


class EmailAlreadyRegisteredError(ConflictError):
    """Raised when registering an email that already has an account."""

    def __init__(self, message: str = "An account with this email already exists"):
        super().__init__(message=message, error_code="EMAIL_ALREADY_REGISTERED")
