"""SQLAlchemy database models."""

from chirpy.models.user import User
from chirpy.models.refresh_token import RefreshToken
from chirpy.models.chirp import Chirp

__all__ = [
    "User",
    "RefreshToken",
    "Chirp",
]
