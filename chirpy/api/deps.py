"""FastAPI dependencies for database sessions and authentication."""

import uuid
from typing import Annotated

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.core.config import AuthConfig, get_auth_config
from chirpy.core.database import get_db
from chirpy.core.exceptions import InvalidAPIKey, InvalidToken
from chirpy.core.security import get_bearer_token, validate_api_key
from chirpy.crud import user as user_crud
from chirpy.models.user import User
from chirpy.services.refresh_token_store import store_errors
from chirpy.services.session_manager import SessionManager, authorize

logger = structlog.get_logger(__name__)

__all__ = [
    "get_db",
    "get_session_manager",
    "get_bearer_credential",
    "get_current_user_id",
    "get_current_user",
    "require_api_key",
]


def get_session_manager(
    db: Annotated[AsyncSession, Depends(get_db)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> SessionManager:
    """Build a SessionManager bound to the request's database session."""
    return SessionManager(db, config)


def get_bearer_credential(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """
    Raw bearer credential, used where a refresh token is presented.

    Raises:
        MissingCredential: If the header is absent
        MalformedCredential: If the header is not ``Bearer <value>``
    """
    return get_bearer_token(authorization)


def get_current_user_id(
    config: Annotated[AuthConfig, Depends(get_auth_config)],
    authorization: Annotated[str | None, Header()] = None,
) -> uuid.UUID:
    """
    Authorize the request from its access token.

    Returns:
        Authenticated user id
    """
    return authorize(authorization, config)


async def get_current_user(
    user_id: Annotated[uuid.UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Load the authenticated user.

    Raises:
        InvalidToken: If the token's user no longer exists
    """
    async with store_errors(db, "get_user_by_id"):
        user = await user_crud.get_user_by_id(db, user_id)
    if user is None:
        logger.info("auth.token_rejected", error="InvalidToken", reason="user not found")
        raise InvalidToken("user not found")
    return user


def require_api_key(
    config: Annotated[AuthConfig, Depends(get_auth_config)],
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """
    Guard for trusted server-to-server callers.

    Raises:
        InvalidAPIKey: If the X-API-Key header is missing or wrong
    """
    if not validate_api_key(x_api_key, config.api_key):
        logger.warning("webhook.api_key_rejected", key_present=bool(x_api_key))
        raise InvalidAPIKey()
