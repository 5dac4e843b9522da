# src/social_backend/models/user.py
"""SQLAlchemy model for registered user identities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from social_backend.db.session import Base
from social_backend.db.time import utcnow

PRESENCE_ONLINE = "online"
PRESENCE_OFFLINE = "offline"


class User(Base):
    """Account identified by a unique, lowercase username."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Stored lowercase, so the unique index is case-insensitive in practice.
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # Seeded profile users have no credential and cannot log in.
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True, default=PRESENCE_ONLINE)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def public_view(self) -> dict[str, str]:
        """Return the identity fields safe to hand to clients."""
        return {"id": str(self.id), "username": self.username}
