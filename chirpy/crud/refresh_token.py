"""CRUD operations for RefreshToken model."""

import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.models.refresh_token import RefreshToken


async def create_refresh_token(
    db: AsyncSession,
    *,
    token: str,
    user_id: uuid.UUID,
    created_at: datetime,
    updated_at: datetime,
    expires_at: datetime,
) -> RefreshToken:
    """
    Persist a new refresh token.

    Args:
        db: Database session
        token: Opaque token value (primary key)
        user_id: Owning user
        created_at: Creation time
        updated_at: Last update time
        expires_at: Fixed expiry

    Returns:
        Created refresh token object
    """
    db_token = RefreshToken(
        token=token,
        user_id=user_id,
        created_at=created_at,
        updated_at=updated_at,
        expires_at=expires_at,
        revoked_at=None,
    )
    db.add(db_token)
    await db.commit()
    await db.refresh(db_token)
    return db_token


async def get_refresh_token(db: AsyncSession, token: str) -> RefreshToken | None:
    """
    Get refresh token by value.

    Args:
        db: Database session
        token: Opaque token value

    Returns:
        RefreshToken object or None if not found
    """
    result = await db.execute(select(RefreshToken).where(RefreshToken.token == token))
    return result.scalar_one_or_none()


async def revoke_token(db: AsyncSession, token: str, revoked_at: datetime) -> bool:
    """
    Revoke a refresh token.

    Single conditional UPDATE: already-revoked rows keep their first
    revocation time and unknown tokens are a no-op.

    Args:
        db: Database session
        token: Opaque token value
        revoked_at: Revocation time

    Returns:
        True if this call revoked the token, False otherwise
    """
    result = await db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token == token,
            RefreshToken.revoked_at.is_(None),
        )
        .values(revoked_at=revoked_at, updated_at=revoked_at)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    return (result.rowcount or 0) > 0


async def rotate_refresh_token(
    db: AsyncSession,
    *,
    token: str,
    new_token: str,
    user_id: uuid.UUID,
    now: datetime,
    expires_at: datetime,
) -> RefreshToken | None:
    """
    Revoke a refresh token and insert its replacement in one transaction.

    Either both writes are committed or neither is: a failed insert leaves the
    presented token active.

    Args:
        db: Database session
        token: Token being exchanged
        new_token: Replacement token value
        user_id: Owning user
        now: Revocation and creation time
        expires_at: Expiry of the replacement

    Returns:
        The replacement token, or None if the presented token was already
        revoked (nothing is written in that case)
    """
    result = await db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token == token,
            RefreshToken.revoked_at.is_(None),
        )
        .values(revoked_at=now, updated_at=now)
        .execution_options(synchronize_session="fetch")
    )
    if not result.rowcount:
        await db.commit()
        return None

    db_token = RefreshToken(
        token=new_token,
        user_id=user_id,
        created_at=now,
        updated_at=now,
        expires_at=expires_at,
        revoked_at=None,
    )
    db.add(db_token)
    await db.commit()
    await db.refresh(db_token)
    return db_token
