# src/social_backend/api/v1/endpoints/posts.py
"""Feed, post, comment and like endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from social_backend.api.v1.dependencies import (
    CurrentUserDep,
    PageDep,
    SessionDep,
    parse_resource_id,
)
from social_backend.schemas.common import ErrorEnvelope, Page
from social_backend.schemas.post import (
    CommentCreate,
    CommentOut,
    LikeToggleOut,
    PostCreate,
    PostOut,
)
from social_backend.services import feed

router = APIRouter(
    prefix="/posts",
    tags=["posts"],
    responses={401: {"model": ErrorEnvelope, "description": "Missing or invalid token"}},
)


@router.get("", response_model=Page[PostOut], summary="Get the feed")
def list_feed(current_user: CurrentUserDep, db: SessionDep, page: PageDep) -> Page[PostOut]:
    """Return every post newest first, with likes and comments resolved."""
    return feed.list_feed(db, current_user, page=page)


@router.post(
    "",
    response_model=PostOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
    responses={400: {"model": ErrorEnvelope, "description": "Validation error"}},
)
def create_post(payload: PostCreate, current_user: CurrentUserDep, db: SessionDep) -> PostOut:
    return feed.create_post(db, current_user, text=payload.text)


@router.post(
    "/{post_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
    responses={
        400: {"model": ErrorEnvelope, "description": "Validation error"},
        404: {"model": ErrorEnvelope, "description": "Post not found"},
    },
)
def add_comment(
    post_id: str,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentOut:
    return feed.add_comment(
        db,
        current_user,
        post_id=parse_resource_id(post_id, "Post not found"),
        text=payload.text,
    )


@router.post(
    "/{post_id}/like",
    response_model=LikeToggleOut,
    summary="Toggle like on a post",
    responses={404: {"model": ErrorEnvelope, "description": "Post not found"}},
)
def toggle_post_like(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> LikeToggleOut:
    """Like the post if the caller has not, otherwise remove the like."""
    return feed.toggle_post_like(
        db,
        current_user,
        post_id=parse_resource_id(post_id, "Post not found"),
    )


@router.post(
    "/{post_id}/comments/{comment_id}/like",
    response_model=LikeToggleOut,
    summary="Toggle like on a comment",
    responses={404: {"model": ErrorEnvelope, "description": "Post or comment not found"}},
)
def toggle_comment_like(
    post_id: str,
    comment_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LikeToggleOut:
    """Like or unlike a comment; the comment must belong to the post."""
    message = "Post or comment not found"
    return feed.toggle_comment_like(
        db,
        current_user,
        post_id=parse_resource_id(post_id, message),
        comment_id=parse_resource_id(comment_id, message),
    )
