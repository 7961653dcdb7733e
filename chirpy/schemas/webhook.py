"""Webhook payload schemas."""

import uuid

from pydantic import BaseModel

USER_UPGRADED_EVENT = "user.upgraded"


class PolkaWebhookData(BaseModel):
    """Event data sent by Polka."""

    user_id: uuid.UUID | None = None


class PolkaWebhook(BaseModel):
    """Polka webhook envelope."""

    event: str
    data: PolkaWebhookData = PolkaWebhookData()
