# src/social_backend/models/friendship.py
"""Models for the directed friend graph: friendships, suggestions and requests."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from social_backend.db.session import Base
from social_backend.db.time import utcnow

REQUEST_STATUS_PENDING = "pending"


class Friendship(Base):
    """Directed edge from ``user_id`` to ``friend_user_id``.

    A mutual friendship is two rows, one per direction.
    """

    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_id", "friend_user_id", name="uq_friendships_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    friend_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    mutual_friends: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class FriendSuggestion(Base):
    """Precomputed recommendation of ``suggested_user_id`` to ``user_id``."""

    __tablename__ = "friend_suggestions"
    __table_args__ = (
        UniqueConstraint("user_id", "suggested_user_id", name="uq_friend_suggestions_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    suggested_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    mutual_friends: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class FriendRequest(Base):
    """Pending request from ``sender_user_id`` to ``receiver_user_id``."""

    __tablename__ = "friend_requests"
    __table_args__ = (
        UniqueConstraint("sender_user_id", "receiver_user_id", name="uq_friend_requests_pair"),
        Index("ix_friend_requests_receiver", "receiver_user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    mutual_friends: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=REQUEST_STATUS_PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
