"""Chirp database model."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from chirpy.core.database import Base

MAX_CHIRP_LENGTH = 140


class Chirp(Base):
    """Short message posted by a user."""

    __tablename__ = "chirps"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        index=True,
    )
    body: Mapped[str] = mapped_column(
        String(MAX_CHIRP_LENGTH),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(  # type: ignore
        "User",
        back_populates="chirps",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Chirp {self.id} by {self.user_id}>"
