"""Refresh token database model."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chirpy.core.database import Base


class RefreshToken(Base):
    """
    Opaque, server-side refresh token.

    Rows are only ever mutated by setting ``revoked_at`` once; expiry is
    fixed at creation.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(  # type: ignore
        "User",
        back_populates="refresh_tokens",
    )

    def __repr__(self) -> str:
        """String representation (never includes the token value)."""
        return f"<RefreshToken user={self.user_id} expires_at={self.expires_at}>"
