"""Development-only admin endpoints."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.api.deps import get_db
from chirpy.core.config import settings
from chirpy.crud import user as user_crud

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/reset")
async def reset(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, str | int]:
    """
    Delete all users (and their chirps and refresh tokens).

    Only available when PLATFORM is "dev".
    """
    if settings.PLATFORM != "dev":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Reset is only available on the dev platform",
        )

    deleted = await user_crud.delete_all_users(db)
    logger.warning("admin.reset", deleted_users=deleted)
    return {"message": "Reset complete", "deleted_users": deleted}
