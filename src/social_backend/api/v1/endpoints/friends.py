# src/social_backend/api/v1/endpoints/friends.py
"""Friend, suggestion and friend-request endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from social_backend.api.v1.dependencies import (
    CurrentUserDep,
    PageDep,
    SessionDep,
    parse_resource_id,
)
from social_backend.schemas.common import DataEnvelope, ErrorEnvelope, Page
from social_backend.schemas.friends import (
    DeclinedRequestOut,
    FriendOut,
    FriendRequestCreate,
    FriendRequestOut,
    SuggestionOut,
)
from social_backend.services import relationships

router = APIRouter(
    prefix="/friends",
    tags=["friends"],
    responses={401: {"model": ErrorEnvelope, "description": "Missing or invalid token"}},
)

REQUEST_DIRECTIONS = ("incoming", "outgoing")


@router.get("", response_model=Page[FriendOut], summary="List friends")
def list_friends(
    current_user: CurrentUserDep,
    db: SessionDep,
    page: PageDep,
    friend_status: Annotated[str | None, Query(alias="status", description="Filter by friend status")] = None,
    search: Annotated[str | None, Query(description="Case-insensitive username substring")] = None,
) -> Page[FriendOut]:
    """List the caller's friends ordered by username."""
    return relationships.list_friends(
        db,
        current_user,
        page=page,
        status=friend_status,
        search=search,
    )


@router.get("/suggestions", response_model=Page[SuggestionOut], summary="List friend suggestions")
def list_suggestions(current_user: CurrentUserDep, db: SessionDep, page: PageDep) -> Page[SuggestionOut]:
    """List precomputed friend suggestions, newest first."""
    return relationships.list_suggestions(db, current_user, page=page)


@router.get("/requests", response_model=Page[FriendRequestOut], summary="List friend requests")
def list_requests(
    current_user: CurrentUserDep,
    db: SessionDep,
    page: PageDep,
    request_type: Annotated[
        str | None,
        Query(alias="type", description="incoming or outgoing; both when omitted"),
    ] = None,
) -> Page[FriendRequestOut]:
    """List pending requests, merged across directions and sorted by send time."""
    direction = request_type if request_type in REQUEST_DIRECTIONS else None
    return relationships.list_requests(db, current_user, page=page, direction=direction)


@router.post(
    "/request",
    response_model=DataEnvelope[FriendRequestOut],
    status_code=status.HTTP_201_CREATED,
    summary="Send a friend request",
    responses={
        400: {"model": ErrorEnvelope, "description": "Validation or business rule failure"},
        404: {"model": ErrorEnvelope, "description": "Target user was not found"},
    },
)
def send_friend_request(
    payload: FriendRequestCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataEnvelope[FriendRequestOut]:
    """Send a friend request to another user by username."""
    created = relationships.send_friend_request(db, current_user, username=payload.username)
    return DataEnvelope[FriendRequestOut](data=created)


@router.post(
    "/requests/{request_id}/accept",
    response_model=DataEnvelope[FriendOut],
    summary="Accept an incoming friend request",
    responses={404: {"model": ErrorEnvelope, "description": "Friend request not found"}},
)
def accept_friend_request(
    request_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataEnvelope[FriendOut]:
    """Accept a request addressed to the caller, creating a mutual friendship."""
    friend = relationships.accept_friend_request(
        db,
        current_user,
        request_id=parse_resource_id(request_id, "Friend request not found"),
    )
    return DataEnvelope[FriendOut](data=friend)


@router.post(
    "/requests/{request_id}/decline",
    response_model=DataEnvelope[DeclinedRequestOut],
    summary="Decline an incoming friend request",
    responses={404: {"model": ErrorEnvelope, "description": "Friend request not found"}},
)
def decline_friend_request(
    request_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataEnvelope[DeclinedRequestOut]:
    """Decline a request addressed to the caller."""
    declined = relationships.decline_friend_request(
        db,
        current_user,
        request_id=parse_resource_id(request_id, "Friend request not found"),
    )
    return DataEnvelope[DeclinedRequestOut](data=declined)
