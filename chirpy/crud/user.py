"""CRUD operations for User model."""

import asyncio
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.core.security import get_password_hash
from chirpy.models.user import User
from chirpy.schemas.user import UserCreate, UserUpdate


async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    """
    Get user by ID.

    Args:
        db: Database session
        user_id: User UUID

    Returns:
        User object or None if not found
    """
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """
    Get user by email address.

    Args:
        db: Database session
        email: User email

    Returns:
        User object or None if not found
    """
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, user_in: UserCreate) -> User:
    """
    Create new user.

    Args:
        db: Database session
        user_in: User creation schema

    Returns:
        Created user object
    """
    hashed_password = await asyncio.to_thread(get_password_hash, user_in.password)
    db_user = User(
        email=user_in.email,
        hashed_password=hashed_password,
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def update_user(
    db: AsyncSession,
    db_user: User,
    user_in: UserUpdate,
) -> User:
    """
    Update existing user.

    Args:
        db: Database session
        db_user: Existing user object
        user_in: User update schema

    Returns:
        Updated user object
    """
    update_data = user_in.model_dump(exclude_unset=True, exclude_none=True)

    # Hash password if it's being updated
    if "password" in update_data:
        hashed_password = await asyncio.to_thread(get_password_hash, update_data["password"])
        del update_data["password"]
        update_data["hashed_password"] = hashed_password

    for field, value in update_data.items():
        setattr(db_user, field, value)

    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def upgrade_to_chirpy_red(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    """
    Mark a user as a Chirpy Red member.

    Args:
        db: Database session
        user_id: User UUID

    Returns:
        Updated user object or None if the user does not exist
    """
    db_user = await get_user_by_id(db, user_id)
    if db_user is None:
        return None

    db_user.is_chirpy_red = True
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def delete_all_users(db: AsyncSession) -> int:
    """
    Delete every user (dev reset).

    Refresh tokens and chirps go with them through ON DELETE CASCADE.

    Args:
        db: Database session

    Returns:
        Number of deleted users
    """
    result = await db.execute(delete(User))
    await db.commit()
    return result.rowcount or 0
