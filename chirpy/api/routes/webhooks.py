"""Webhook endpoints for trusted server-to-server callers."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.api.deps import get_db, require_api_key
from chirpy.crud import user as user_crud
from chirpy.schemas.webhook import USER_UPGRADED_EVENT, PolkaWebhook

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post(
    "/polka/webhooks",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_api_key)],
)
async def polka_webhook(
    event_in: PolkaWebhook,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """
    Handle Polka payment events.

    Only ``user.upgraded`` is acted upon; other events are acknowledged.

    Raises:
        InvalidAPIKey: If the X-API-Key header is wrong
        HTTPException: If the upgraded user does not exist
    """
    if event_in.event != USER_UPGRADED_EVENT:
        logger.debug("webhook.event_ignored", webhook_event=event_in.event)
        return None

    if event_in.data.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="user_id is required",
        )

    user = await user_crud.upgrade_to_chirpy_red(db, event_in.data.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    logger.info("webhook.user_upgraded", user_id=str(user.id))
    return None
