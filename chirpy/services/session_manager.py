"""Session lifecycle: login, refresh, revoke and request authorization."""

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.core.config import AuthConfig
from chirpy.core.exceptions import AuthError, InvalidCredentials, TokenExpired, TokenRevoked
from chirpy.core.security import get_bearer_token, get_password_hash, verify_password
from chirpy.core.tokens import create_access_token, validate_access_token
from chirpy.crud import user as user_crud
from chirpy.models.refresh_token import RefreshToken
from chirpy.models.user import User
from chirpy.services.refresh_token_store import (
    RefreshTokenState,
    RefreshTokenStore,
    refresh_token_state,
    store_errors,
)
from chirpy.utils.time import utcnow

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    # Verified against for unknown emails so both login failures cost the same.
    return get_password_hash("chirpy-timing-equalizer")


def _check_password(password: str, hashed_password: str | None) -> bool:
    if hashed_password is None:
        verify_password(password, _dummy_password_hash())
        return False
    return verify_password(password, hashed_password)


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str
    refresh_token: RefreshToken


@dataclass(frozen=True)
class RefreshResult:
    user_id: uuid.UUID
    token: str
    refresh_token: RefreshToken | None = None


def authorize(authorization: str | None, config: AuthConfig) -> uuid.UUID:
    """
    Resolve the user behind an ``Authorization`` header.

    Every protected operation goes through here: bearer extraction followed
    by access-token validation. No database round-trip is involved.

    Args:
        authorization: Raw Authorization header value
        config: Auth configuration holding the signing secret

    Returns:
        The authenticated user's id

    Raises:
        MissingCredential, MalformedCredential, InvalidToken
    """
    try:
        token = get_bearer_token(authorization)
        return validate_access_token(token, config.secret, issuer=config.issuer)
    except AuthError as exc:
        logger.info("auth.token_rejected", error=type(exc).__name__, reason=exc.reason)
        raise


class SessionManager:
    """Orchestrates password checks, access tokens and refresh tokens."""

    def __init__(
        self,
        db: AsyncSession,
        config: AuthConfig,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize session manager.

        Args:
            db: Database session
            config: Immutable auth configuration
            clock: Source of the current (naive UTC) time
        """
        self.db = db
        self.config = config
        self._clock = clock
        self.refresh_tokens = RefreshTokenStore(db, config.refresh_token_ttl, clock)

    def _issue_access_token(self, user_id: uuid.UUID, expires_in_seconds: int | None = None) -> str:
        return create_access_token(
            user_id,
            self.config.secret,
            self.config.resolve_access_ttl(expires_in_seconds),
            issuer=self.config.issuer,
            now=self._clock(),
        )

    async def login(
        self,
        email: str,
        password: str,
        expires_in_seconds: int | None = None,
    ) -> LoginResult:
        """
        Authenticate with email and password and open a session.

        Args:
            email: User email
            password: Plain text password
            expires_in_seconds: Requested access-token lifetime (clamped)

        Returns:
            The user, a signed access token and a new refresh token

        Raises:
            InvalidCredentials: Unknown email or wrong password
            StoreUnavailable: If the database failed
        """
        async with store_errors(self.db, "get_user_by_email"):
            user = await user_crud.get_user_by_email(self.db, email)

        hashed_password = user.hashed_password if user is not None else None
        password_ok = await asyncio.to_thread(_check_password, password, hashed_password)

        if user is None or not password_ok:
            logger.info("auth.login_failed", known_user=user is not None)
            raise InvalidCredentials()

        token = self._issue_access_token(user.id, expires_in_seconds)
        refresh_token = await self.refresh_tokens.create(user.id)

        logger.info("auth.login_succeeded", user_id=str(user.id))
        return LoginResult(user=user, token=token, refresh_token=refresh_token)

    async def refresh(self, refresh_token: str) -> RefreshResult:
        """
        Exchange a refresh token for a new access token.

        The refresh token is left untouched unless rotation is enabled, in
        which case it is revoked and replaced.

        Raises:
            InvalidToken: Unknown token
            TokenRevoked: Token was revoked
            TokenExpired: Token is past its expiry
            StoreUnavailable: If the database failed
        """
        try:
            record = await self.refresh_tokens.lookup(refresh_token)
            state = refresh_token_state(record, self._clock())
            if state is RefreshTokenState.REVOKED:
                raise TokenRevoked("refresh token revoked")
            if state is RefreshTokenState.EXPIRED:
                raise TokenExpired("refresh token expired")
        except AuthError as exc:
            logger.info("auth.refresh_rejected", error=type(exc).__name__, reason=exc.reason)
            raise

        user_id = record.user_id
        token = self._issue_access_token(user_id)

        if not self.config.rotate_refresh_tokens:
            return RefreshResult(user_id=user_id, token=token)

        # None means another request revoked or rotated it after our lookup.
        new_refresh_token = await self.refresh_tokens.rotate(refresh_token, user_id)
        if new_refresh_token is None:
            logger.info("auth.refresh_rejected", error="TokenRevoked", reason="rotated concurrently")
            raise TokenRevoked("refresh token rotated concurrently")
        logger.info("auth.refresh_token_rotated", user_id=str(user_id))
        return RefreshResult(user_id=user_id, token=token, refresh_token=new_refresh_token)

    async def revoke(self, refresh_token: str) -> None:
        """
        Revoke a refresh token. Succeeds whatever the token's prior state.

        Raises:
            StoreUnavailable: If the database failed
        """
        revoked = await self.refresh_tokens.revoke(refresh_token)
        logger.info("auth.refresh_token_revoked", changed=revoked)

    def authorize(self, authorization: str | None) -> uuid.UUID:
        """Resolve the user behind an Authorization header."""
        return authorize(authorization, self.config)
