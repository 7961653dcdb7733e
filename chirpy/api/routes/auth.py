"""Authentication endpoints."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from chirpy.api.deps import get_bearer_credential, get_session_manager
from chirpy.core.rate_limit import auth_login_limit, auth_refresh_limit
from chirpy.schemas.token import LoginRequest, LoginResponse, RefreshResponse
from chirpy.schemas.user import User as UserSchema
from chirpy.services.session_manager import SessionManager

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/login", response_model=LoginResponse)
@auth_login_limit
async def login(
    request: Request,
    response: Response,
    login_in: LoginRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> LoginResponse:
    """
    Log in with email and password.

    Args:
        login_in: Email, password and optional access-token lifetime
        sessions: Session manager

    Returns:
        User profile with an access token and a refresh token

    Raises:
        InvalidCredentials: If the email is unknown or the password is wrong
    """
    result = await sessions.login(
        login_in.email,
        login_in.password,
        login_in.expires_in_seconds,
    )
    profile = UserSchema.model_validate(result.user)
    return LoginResponse(
        **profile.model_dump(),
        token=result.token,
        refresh_token=result.refresh_token.token,
    )


@router.post("/refresh", response_model=RefreshResponse, response_model_exclude_none=True)
@auth_refresh_limit
async def refresh(
    request: Request,
    response: Response,
    refresh_token: Annotated[str, Depends(get_bearer_credential)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> RefreshResponse:
    """
    Exchange the refresh token in the Authorization header for an access token.

    Returns:
        New access token (and a new refresh token when rotation is enabled)

    Raises:
        InvalidToken: If the refresh token is unknown, expired or revoked
    """
    result = await sessions.refresh(refresh_token)
    return RefreshResponse(
        token=result.token,
        refresh_token=result.refresh_token.token if result.refresh_token else None,
    )


@router.post("/revoke", status_code=status.HTTP_204_NO_CONTENT)
async def revoke(
    refresh_token: Annotated[str, Depends(get_bearer_credential)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> None:
    """
    Revoke the refresh token in the Authorization header (logout).

    Succeeds for tokens that are unknown or already revoked.
    """
    await sessions.revoke(refresh_token)
