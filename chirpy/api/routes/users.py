"""User endpoints."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.api.deps import get_current_user, get_db
from chirpy.crud import user as user_crud
from chirpy.models.user import User
from chirpy.schemas.user import User as UserSchema
from chirpy.schemas.user import UserCreate, UserUpdate

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Register a new user.

    Raises:
        HTTPException: If email already registered
    """
    if await user_crud.get_user_by_email(db, user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = await user_crud.create_user(db, user_in)
    logger.info("user.created", user_id=str(user.id))
    return user


@router.put("", response_model=UserSchema)
async def update_current_user(
    user_in: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Update the authenticated user's email and/or password.

    Raises:
        HTTPException: If the new email belongs to another user
    """
    if user_in.email and user_in.email != current_user.email:
        if await user_crud.get_user_by_email(db, user_in.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

    user = await user_crud.update_user(db, current_user, user_in)
    logger.info("user.updated", user_id=str(user.id))
    return user
