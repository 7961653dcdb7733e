"""Rate limiting configuration using SlowAPI."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chirpy.core.config import settings


def get_client_identifier(request: Request) -> str:
    """
    Get rate limit identifier from request.

    Auth endpoints are hit before anyone is authenticated, so the key is
    always the client IP address.

    Args:
        request: FastAPI request object

    Returns:
        Unique identifier string for rate limiting
    """
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
    headers_enabled=True,  # Add X-RateLimit-* headers to responses
)

# Authentication endpoints (most critical - prevent brute-force)
auth_login_limit = limiter.limit(settings.RATE_LIMIT_AUTH_LOGIN)
auth_refresh_limit = limiter.limit(settings.RATE_LIMIT_AUTH_REFRESH)
