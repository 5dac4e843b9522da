"""Friend graph queries and the friend-request protocol."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Literal

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from social_backend.core.errors import ApiError, ErrorCode, not_found, validation_error
from social_backend.core.security import TokenIdentity
from social_backend.db.time import as_utc, utcnow
from social_backend.models import FriendRequest, Friendship, FriendSuggestion, User
from social_backend.models.friendship import REQUEST_STATUS_PENDING
from social_backend.schemas.common import Page
from social_backend.schemas.friends import (
    DeclinedRequestOut,
    FriendOut,
    FriendRequestOut,
    SuggestionOut,
)
from social_backend.services.identity import find_user_by_username, normalize_username
from social_backend.utils.pagination import PageParams
from social_backend.utils.time import to_iso, to_relative_time

logger = logging.getLogger(__name__)

Direction = Literal["incoming", "outgoing"]
LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def _friend_out(friendship: Friendship, friend: User) -> FriendOut:
    return FriendOut(
        id=str(friendship.id),
        username=friend.username,
        profile_image=friend.profile_image,
        status=friendship.status or None,
        mutual_friends=friendship.mutual_friends or 0,
    )


def _request_out(
    request: FriendRequest,
    other: User,
    direction: Direction,
    now: datetime | None = None,
) -> FriendRequestOut:
    return FriendRequestOut(
        id=str(request.id),
        username=other.username,
        profile_image=other.profile_image,
        mutual_friends=request.mutual_friends or 0,
        type=direction,
        sent_at=to_iso(request.created_at),
        relative_timestamp=to_relative_time(request.created_at, now),
    )


# ==================== Reads ====================

def list_friends(
    db: Session,
    viewer: TokenIdentity,
    *,
    page: PageParams,
    status: str | None = None,
    search: str | None = None,
) -> Page[FriendOut]:
    """Return the viewer's friendships ordered by friend username.

    ``status`` filters by equality; ``search`` is a case-insensitive substring
    match on the friend's username. ``total`` counts all filtered rows.
    """
    query: Query = (
        db.query(Friendship, User)
        .join(User, Friendship.friend_user_id == User.id)
        .filter(Friendship.user_id == viewer.id)
    )
    if status:
        query = query.filter(Friendship.status == status)
    if search:
        term = f"%{_escape_like(search.strip().lower())}%"
        query = query.filter(func.lower(User.username).like(term, escape=LIKE_ESCAPE))

    total = query.count()
    rows = (
        query.order_by(User.username.asc(), Friendship.id.asc())
        .limit(page.limit)
        .offset(page.offset)
        .all()
    )
    data = [_friend_out(friendship, friend) for friendship, friend in rows]
    return Page[FriendOut](data=data, pagination=page.pagination(total))


def list_suggestions(db: Session, viewer: TokenIdentity, *, page: PageParams) -> Page[SuggestionOut]:
    """Return the viewer's precomputed suggestions, newest first."""
    query: Query = (
        db.query(FriendSuggestion, User)
        .join(User, FriendSuggestion.suggested_user_id == User.id)
        .filter(FriendSuggestion.user_id == viewer.id)
    )

    total = query.count()
    rows = (
        query.order_by(FriendSuggestion.created_at.desc(), FriendSuggestion.id.desc())
        .limit(page.limit)
        .offset(page.offset)
        .all()
    )
    data = [
        SuggestionOut(
            id=str(suggestion.id),
            username=suggested.username,
            profile_image=suggested.profile_image,
            mutual_friends=suggestion.mutual_friends or 0,
        )
        for suggestion, suggested in rows
    ]
    return Page[SuggestionOut](data=data, pagination=page.pagination(total))


def _incoming_requests(db: Session, viewer_id: int) -> list[tuple[FriendRequest, User]]:
    return (
        db.query(FriendRequest, User)
        .join(User, FriendRequest.sender_user_id == User.id)
        .filter(FriendRequest.receiver_user_id == viewer_id)
        .order_by(FriendRequest.created_at.desc())
        .all()
    )


def _outgoing_requests(db: Session, viewer_id: int) -> list[tuple[FriendRequest, User]]:
    return (
        db.query(FriendRequest, User)
        .join(User, FriendRequest.receiver_user_id == User.id)
        .filter(FriendRequest.sender_user_id == viewer_id)
        .order_by(FriendRequest.created_at.desc())
        .all()
    )


def list_requests(
    db: Session,
    viewer: TokenIdentity,
    *,
    page: PageParams,
    direction: Direction | None = None,
) -> Page[FriendRequestOut]:
    """Return pending requests involving the viewer.

    Incoming and outgoing requests are fetched separately, merged, sorted by
    ``sentAt`` descending and only then paginated, so a page may mix both
    directions.
    """
    now = utcnow()
    merged: list[tuple[datetime, FriendRequestOut]] = []

    if direction in (None, "incoming"):
        for request, sender in _incoming_requests(db, viewer.id):
            merged.append((as_utc(request.created_at), _request_out(request, sender, "incoming", now)))

    if direction in (None, "outgoing"):
        for request, receiver in _outgoing_requests(db, viewer.id):
            merged.append((as_utc(request.created_at), _request_out(request, receiver, "outgoing", now)))

    merged.sort(key=lambda item: item[0], reverse=True)
    ordered = [item for _, item in merged]
    return Page[FriendRequestOut](data=page.slice(ordered), pagination=page.pagination(len(ordered)))


# ==================== Request protocol ====================

def _friendship_exists(db: Session, user_id: int, friend_user_id: int) -> bool:
    return (
        db.query(Friendship.id)
        .filter(Friendship.user_id == user_id, Friendship.friend_user_id == friend_user_id)
        .first()
        is not None
    )


def _request_exists(db: Session, sender_id: int, receiver_id: int) -> bool:
    return (
        db.query(FriendRequest.id)
        .filter(
            FriendRequest.sender_user_id == sender_id,
            FriendRequest.receiver_user_id == receiver_id,
        )
        .first()
        is not None
    )


def send_friend_request(db: Session, viewer: TokenIdentity, *, username: str | None) -> FriendRequestOut:
    """Create a pending request from the viewer to ``username``.

    Checks run before any write, in this order: self-target, unknown target,
    existing friendship, request already sent, request pending from the target.
    A request from the target is reported as ``request_exists`` and is never
    turned into a friendship here.
    """
    if not username or not username.strip():
        raise validation_error("Username is required")

    normalized = normalize_username(username)
    if normalized == normalize_username(viewer.username):
        raise validation_error("Cannot send friend request to yourself")

    target = find_user_by_username(db, normalized)
    if target is None:
        raise ApiError(ErrorCode.USER_NOT_FOUND, "Target user was not found")
    if target.id == viewer.id:
        raise validation_error("Cannot send friend request to yourself")

    if _friendship_exists(db, viewer.id, target.id):
        raise ApiError(ErrorCode.ALREADY_FRIENDS, "You are already friends with this user")
    if _request_exists(db, viewer.id, target.id):
        raise ApiError(
            ErrorCode.REQUEST_ALREADY_SENT,
            "Friend request has already been sent to this user",
        )
    if _request_exists(db, target.id, viewer.id):
        raise ApiError(ErrorCode.REQUEST_EXISTS, "This user has already sent you a friend request")

    request = FriendRequest(
        sender_user_id=viewer.id,
        receiver_user_id=target.id,
        mutual_friends=0,
        status=REQUEST_STATUS_PENDING,
        created_at=utcnow(),
    )
    db.add(request)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if _request_exists(db, viewer.id, target.id):
            raise ApiError(
                ErrorCode.REQUEST_ALREADY_SENT,
                "Friend request has already been sent to this user",
            ) from None
        raise
    db.refresh(request)

    logger.info(
        "Friend request id=%s sent from user_id=%s to user_id=%s",
        request.id,
        viewer.id,
        target.id,
    )
    return _request_out(request, target, "outgoing")


def _get_incoming_request(db: Session, viewer: TokenIdentity, request_id: int) -> FriendRequest:
    request = (
        db.query(FriendRequest)
        .filter(FriendRequest.id == request_id, FriendRequest.receiver_user_id == viewer.id)
        .first()
    )
    if request is None:
        raise not_found("Friend request not found")
    return request


def accept_friend_request(db: Session, viewer: TokenIdentity, *, request_id: int) -> FriendOut:
    """Turn an incoming request into a mutual friendship.

    Both directed friendship rows are written, suggestions between the pair
    are dropped and the request row is removed.
    """
    request = _get_incoming_request(db, viewer, request_id)
    sender = db.get(User, request.sender_user_id)
    receiver = db.get(User, request.receiver_user_id)
    if sender is None or receiver is None:
        raise not_found("Friend request not found")

    for owner, friend in ((receiver, sender), (sender, receiver)):
        if not _friendship_exists(db, owner.id, friend.id):
            db.add(
                Friendship(
                    user_id=owner.id,
                    friend_user_id=friend.id,
                    status=friend.status,
                    mutual_friends=request.mutual_friends or 0,
                    created_at=utcnow(),
                )
            )

    db.query(FriendSuggestion).filter(
        or_(
            and_(
                FriendSuggestion.user_id == sender.id,
                FriendSuggestion.suggested_user_id == receiver.id,
            ),
            and_(
                FriendSuggestion.user_id == receiver.id,
                FriendSuggestion.suggested_user_id == sender.id,
            ),
        )
    ).delete(synchronize_session=False)
    db.delete(request)
    db.commit()

    friendship = (
        db.query(Friendship)
        .filter(Friendship.user_id == receiver.id, Friendship.friend_user_id == sender.id)
        .one()
    )
    logger.info("Friend request id=%s accepted by user_id=%s", request_id, viewer.id)
    return _friend_out(friendship, sender)


def decline_friend_request(db: Session, viewer: TokenIdentity, *, request_id: int) -> DeclinedRequestOut:
    """Discard an incoming request; the sender may ask again later."""
    request = _get_incoming_request(db, viewer, request_id)
    db.delete(request)
    db.commit()

    logger.info("Friend request id=%s declined by user_id=%s", request_id, viewer.id)
    return DeclinedRequestOut(id=str(request_id))
