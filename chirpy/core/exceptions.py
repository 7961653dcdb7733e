"""Authentication error taxonomy.

Every credential failure is a 401 with a deliberately uniform public message:
login failures never reveal whether the email exists, and token failures never
reveal whether the token was malformed, expired or revoked. The concrete class
and the optional ``reason`` stay available for logging.
"""

from fastapi import status

CREDENTIALS_DETAIL = "Could not validate credentials"


class AuthError(Exception):
    """Base class for auth failures that map to an HTTP response."""

    status_code: int = status.HTTP_401_UNAUTHORIZED
    detail: str = CREDENTIALS_DETAIL
    www_authenticate: str | None = "Bearer"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.__class__.__name__
        super().__init__(self.reason)


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (indistinguishable on purpose)."""

    detail = "Incorrect email or password"


class MissingCredential(AuthError):
    """Authorization header absent or empty."""


class MalformedCredential(AuthError):
    """Authorization header present but not ``Bearer <value>``."""


class InvalidToken(AuthError):
    """Token failed signature, algorithm, structure, time or claim checks."""


class TokenExpired(InvalidToken):
    """Refresh token past its expiry."""


class TokenRevoked(InvalidToken):
    """Refresh token explicitly revoked."""


class InvalidAPIKey(AuthError):
    """Preshared API key missing or wrong."""

    detail = "Invalid API key"
    www_authenticate = None


class StoreUnavailable(AuthError):
    """Persistence layer failed while serving an auth operation."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Service temporarily unavailable"
    www_authenticate = None
