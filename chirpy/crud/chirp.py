"""CRUD operations for Chirp model."""

import uuid
from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.models.chirp import Chirp
from chirpy.utils.time import utcnow


async def create_chirp(db: AsyncSession, *, body: str, user_id: uuid.UUID) -> Chirp:
    """
    Create new chirp.

    Args:
        db: Database session
        body: Chirp text
        user_id: Author

    Returns:
        Created chirp object
    """
    now = utcnow()
    db_chirp = Chirp(body=body, user_id=user_id, created_at=now, updated_at=now)
    db.add(db_chirp)
    await db.commit()
    await db.refresh(db_chirp)
    return db_chirp


async def get_chirp_by_id(db: AsyncSession, chirp_id: uuid.UUID) -> Chirp | None:
    """
    Get chirp by ID.

    Args:
        db: Database session
        chirp_id: Chirp UUID

    Returns:
        Chirp object or None if not found
    """
    result = await db.execute(select(Chirp).where(Chirp.id == chirp_id))
    return result.scalar_one_or_none()


async def get_chirps(
    db: AsyncSession,
    author_id: uuid.UUID | None = None,
    sort: Literal["asc", "desc"] = "asc",
) -> list[Chirp]:
    """
    List chirps ordered by creation time.

    Args:
        db: Database session
        author_id: Only return chirps by this user
        sort: "asc" (oldest first) or "desc"

    Returns:
        List of chirp objects
    """
    query = select(Chirp)
    if author_id is not None:
        query = query.where(Chirp.user_id == author_id)

    order = Chirp.created_at.desc() if sort == "desc" else Chirp.created_at.asc()
    result = await db.execute(query.order_by(order))
    return list(result.scalars().all())


async def delete_chirp(db: AsyncSession, db_chirp: Chirp) -> None:
    """
    Delete chirp permanently.

    Args:
        db: Database session
        db_chirp: Chirp object to delete
    """
    await db.delete(db_chirp)
    await db.commit()
