"""Chirp endpoints."""

import uuid
from typing import Annotated, Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.api.deps import get_current_user, get_current_user_id, get_db
from chirpy.crud import chirp as chirp_crud
from chirpy.models.chirp import MAX_CHIRP_LENGTH, Chirp
from chirpy.models.user import User
from chirpy.schemas.chirp import Chirp as ChirpSchema
from chirpy.schemas.chirp import ChirpCreate

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("", response_model=ChirpSchema, status_code=status.HTTP_201_CREATED)
async def create_chirp(
    chirp_in: ChirpCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Chirp:
    """
    Post a chirp as the authenticated user.

    Raises:
        HTTPException: If the chirp is longer than 140 characters
    """
    if len(chirp_in.body) > MAX_CHIRP_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Chirp is too long",
        )

    chirp = await chirp_crud.create_chirp(db, body=chirp_in.body, user_id=current_user.id)
    logger.info("chirp.created", chirp_id=str(chirp.id), user_id=str(current_user.id))
    return chirp


@router.get("", response_model=list[ChirpSchema])
async def list_chirps(
    db: Annotated[AsyncSession, Depends(get_db)],
    author_id: Annotated[uuid.UUID | None, Query()] = None,
    sort: Annotated[Literal["asc", "desc"], Query()] = "asc",
) -> list[Chirp]:
    """
    List chirps, optionally by author, ordered by creation time.
    """
    return await chirp_crud.get_chirps(db, author_id=author_id, sort=sort)


@router.get("/{chirp_id}", response_model=ChirpSchema)
async def get_chirp(
    chirp_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Chirp:
    """
    Get a single chirp.

    Raises:
        HTTPException: If the chirp does not exist
    """
    chirp = await chirp_crud.get_chirp_by_id(db, chirp_id)
    if chirp is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Chirp not found",
        )
    return chirp


@router.delete("/{chirp_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chirp(
    chirp_id: uuid.UUID,
    user_id: Annotated[uuid.UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """
    Delete one of the authenticated user's chirps.

    Raises:
        HTTPException: 404 if the chirp does not exist, 403 if it belongs to someone else
    """
    chirp = await chirp_crud.get_chirp_by_id(db, chirp_id)
    if chirp is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Chirp not found",
        )
    if chirp.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not the author of this chirp",
        )

    await chirp_crud.delete_chirp(db, chirp)
    logger.info("chirp.deleted", chirp_id=str(chirp_id), user_id=str(user_id))
