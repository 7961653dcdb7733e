"""Signed access tokens (JWT, HS256) and opaque refresh-token values."""

import calendar
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from chirpy.core.exceptions import InvalidToken
from chirpy.utils.time import utcnow

# Pinned. The "alg" header of an incoming token is never trusted.
JWT_ALGORITHM = "HS256"

# 32 random bytes, hex encoded
REFRESH_TOKEN_BYTES = 32

_DECODE_OPTIONS = {
    # aud carries the user id; it is checked against sub below
    "verify_aud": False,
    "require_exp": True,
    "require_nbf": True,
    "require_iat": True,
    "require_iss": True,
    "require_sub": True,
    "leeway": 0,
}


def _timestamp(moment: datetime) -> int:
    return calendar.timegm(moment.utctimetuple())


def create_access_token(
    user_id: uuid.UUID,
    secret: str,
    expires_delta: timedelta,
    *,
    issuer: str,
    now: datetime | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        user_id: Subject and audience of the token
        secret: HMAC signing secret
        expires_delta: Token lifetime
        issuer: Value of the iss claim
        now: Issue time (naive UTC), defaults to the current time

    Returns:
        Encoded JWT token
    """
    if not secret:
        raise ValueError("secret cannot be empty")

    issued_at = now or utcnow()
    subject = str(user_id)
    claims: dict[str, Any] = {
        "iss": issuer,
        "sub": subject,
        "aud": [subject],
        "iat": _timestamp(issued_at),
        "nbf": _timestamp(issued_at),
        "exp": _timestamp(issued_at + expires_delta),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: str, *, issuer: str) -> dict[str, Any]:
    """
    Verify a JWT access token and return its claims.

    The algorithm is checked on the unverified header before any signature
    work is done, and decoding only accepts HS256.

    Raises:
        InvalidToken: On any failure; ``reason`` tells which check failed
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise InvalidToken("malformed") from exc

    if header.get("alg") != JWT_ALGORITHM:
        raise InvalidToken("algorithm")

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            issuer=issuer,
            options=_DECODE_OPTIONS,
        )
    except ExpiredSignatureError as exc:
        raise InvalidToken("expired") from exc
    except JWTClaimsError as exc:
        raise InvalidToken("claims") from exc
    except JWTError as exc:
        raise InvalidToken("signature") from exc


def validate_access_token(token: str, secret: str, *, issuer: str) -> uuid.UUID:
    """
    Validate a JWT access token and return the user id it was issued for.

    Raises:
        InvalidToken: If the token is not valid right now
    """
    claims = decode_access_token(token, secret, issuer=issuer)

    try:
        user_id = uuid.UUID(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidToken("subject") from exc

    audience = claims.get("aud")
    if isinstance(audience, str):
        audience = [audience]
    if audience is not None and str(user_id) not in audience:
        raise InvalidToken("claims")

    return user_id


def generate_refresh_token() -> str:
    """
    Generate an opaque refresh token.

    Returns:
        64 hex characters (256 bits from the OS CSPRNG)
    """
    return secrets.token_hex(REFRESH_TOKEN_BYTES)
