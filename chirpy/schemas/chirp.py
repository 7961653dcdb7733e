"""Chirp Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ChirpCreate(BaseModel):
    """Schema for posting a chirp (length is checked by the endpoint)."""

    body: str = Field(..., min_length=1)


class Chirp(BaseModel):
    """Chirp schema for API responses."""

    id: uuid.UUID
    body: str
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
