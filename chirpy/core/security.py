"""Security utilities for password hashing and request credentials."""

import hmac
import re

import bcrypt as _bcrypt

from chirpy.core.config import settings
from chirpy.core.exceptions import MalformedCredential, MissingCredential

# bcrypt ignores everything past 72 bytes, so longer passwords are refused
BCRYPT_MAX_BYTES = 72

_BEARER_RE = re.compile(r"Bearer (\S+)")


def password_too_long(password: str) -> bool:
    """True if the UTF-8 encoding of the password exceeds bcrypt's input limit."""
    return len(password.encode("utf-8")) > BCRYPT_MAX_BYTES


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise (always False for
        passwords longer than 72 bytes, which can never have been hashed)

    Raises:
        ValueError: If hashed_password is not a bcrypt hash
    """
    if password_too_long(plain_password):
        return False
    return _bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def get_password_hash(password: str, rounds: int | None = None) -> str:
    """
    Hash a password using bcrypt.

    Salt generation reads the OS entropy source; failures there propagate
    instead of degrading to a weaker scheme.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor, defaults to settings.BCRYPT_ROUNDS

    Returns:
        Hashed password

    Raises:
        ValueError: If the password is longer than 72 bytes
    """
    if password_too_long(password):
        raise ValueError(f"password cannot exceed {BCRYPT_MAX_BYTES} bytes")

    salt = _bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    hashed = _bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract the credential from an ``Authorization: Bearer <value>`` header.

    Args:
        authorization: Raw header value (None when the header is absent)

    Returns:
        The token string

    Raises:
        MissingCredential: If the header is absent or empty
        MalformedCredential: If the header does not match ``Bearer <value>``
    """
    if not authorization:
        raise MissingCredential("authorization header missing")
    match = _BEARER_RE.fullmatch(authorization)
    if match is None:
        raise MalformedCredential("authorization header is not a bearer credential")
    return match.group(1)


def validate_api_key(api_key: str | None, expected_key: str) -> bool:
    """
    Check a preshared API key in constant time.

    An unset expected key never validates, so a missing configuration
    cannot open the endpoint.
    """
    if not api_key or not expected_key:
        return False
    return hmac.compare_digest(api_key.encode("utf-8"), expected_key.encode("utf-8"))
