"""Refresh token lifecycle on top of the refresh_tokens table."""

import enum
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.core.exceptions import InvalidToken, StoreUnavailable
from chirpy.core.tokens import generate_refresh_token
from chirpy.crud import refresh_token as refresh_token_crud
from chirpy.models.refresh_token import RefreshToken
from chirpy.utils.time import utcnow

logger = structlog.get_logger(__name__)


class RefreshTokenState(str, enum.Enum):
    """Refresh token states. EXPIRED and REVOKED are terminal."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


def refresh_token_state(record: RefreshToken, now: datetime) -> RefreshTokenState:
    """
    Evaluate a stored refresh token at a point in time.

    Revocation wins over expiry when both apply.
    """
    if record.revoked_at is not None:
        return RefreshTokenState.REVOKED
    if now >= record.expires_at:
        return RefreshTokenState.EXPIRED
    return RefreshTokenState.ACTIVE


@asynccontextmanager
async def store_errors(db: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Turn persistence failures into StoreUnavailable and reset the session."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("store.unavailable", operation=operation, error=type(exc).__name__)
        try:
            await db.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.warning("store.rollback_failed", operation=operation, error=type(rollback_exc).__name__)
        raise StoreUnavailable(operation) from exc


class RefreshTokenStore:
    """Create, look up and revoke opaque refresh tokens."""

    def __init__(
        self,
        db: AsyncSession,
        ttl: timedelta,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize refresh token store.

        Args:
            db: Database session
            ttl: Lifetime of newly created tokens
            clock: Source of the current (naive UTC) time
        """
        self.db = db
        self.ttl = ttl
        self._clock = clock

    async def create(self, user_id: uuid.UUID) -> RefreshToken:
        """Create and persist a new refresh token for a user."""
        token = generate_refresh_token()
        now = self._clock()
        async with store_errors(self.db, "create_refresh_token"):
            record = await refresh_token_crud.create_refresh_token(
                self.db,
                token=token,
                user_id=user_id,
                created_at=now,
                updated_at=now,
                expires_at=now + self.ttl,
            )
        logger.info("auth.refresh_token_created", user_id=str(user_id), expires_at=record.expires_at.isoformat())
        return record

    async def lookup(self, token: str) -> RefreshToken:
        """
        Fetch a refresh token record.

        Raises:
            InvalidToken: If no such token exists
            StoreUnavailable: If the database failed
        """
        if not token:
            raise InvalidToken("refresh token empty")
        async with store_errors(self.db, "get_refresh_token"):
            record = await refresh_token_crud.get_refresh_token(self.db, token)
        if record is None:
            raise InvalidToken("refresh token not found")
        return record

    async def rotate(self, token: str, user_id: uuid.UUID) -> RefreshToken | None:
        """
        Atomically revoke a token and create its replacement.

        Returns:
            The replacement, or None if the token was already revoked

        Raises:
            StoreUnavailable: If the database failed (nothing is changed)
        """
        new_token = generate_refresh_token()
        now = self._clock()
        async with store_errors(self.db, "rotate_refresh_token"):
            record = await refresh_token_crud.rotate_refresh_token(
                self.db,
                token=token,
                new_token=new_token,
                user_id=user_id,
                now=now,
                expires_at=now + self.ttl,
            )
        if record is not None:
            logger.info("auth.refresh_token_created", user_id=str(user_id), expires_at=record.expires_at.isoformat())
        return record

    async def revoke(self, token: str) -> bool:
        """
        Revoke a refresh token. Idempotent.

        Returns:
            True if this call performed the revocation
        """
        if not token:
            return False
        async with store_errors(self.db, "revoke_token"):
            revoked = await refresh_token_crud.revoke_token(self.db, token, self._clock())
        return revoked
