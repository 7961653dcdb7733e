"""User Pydantic schemas for request/response validation."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from chirpy.core.security import BCRYPT_MAX_BYTES, password_too_long


def _check_password_length(v: str | None) -> str | None:
    if v is not None and password_too_long(v):
        raise ValueError(f"Password cannot exceed {BCRYPT_MAX_BYTES} bytes")
    return v


# Properties to receive via API on creation
class UserCreate(BaseModel):
    """Schema for user registration."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """bcrypt only accepts up to 72 bytes."""
        return _check_password_length(v)


# Properties to receive via API on update
class UserUpdate(BaseModel):
    """Schema for updating the authenticated user."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=1)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str | None) -> str | None:
        return _check_password_length(v)


# Additional properties to return via API
class User(BaseModel):
    """User schema for API responses."""

    id: uuid.UUID
    email: EmailStr
    created_at: datetime
    updated_at: datetime
    is_chirpy_red: bool = False

    model_config = {"from_attributes": True}
