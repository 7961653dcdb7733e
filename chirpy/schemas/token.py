"""Token schemas for authentication."""

from pydantic import BaseModel

from chirpy.schemas.user import User


class LoginRequest(BaseModel):
    """Credentials posted to /login."""

    email: str
    password: str
    expires_in_seconds: int | None = None


class LoginResponse(User):
    """User profile plus the issued token pair."""

    token: str
    refresh_token: str


class RefreshResponse(BaseModel):
    """New access token (and the rotated refresh token, when rotation is on)."""

    token: str
    refresh_token: str | None = None

