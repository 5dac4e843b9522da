"""Feed assembly, posting, commenting and like toggles."""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from social_backend.core.errors import ApiError, ErrorCode, not_found, validation_error
from social_backend.core.security import TokenIdentity
from social_backend.db.time import utcnow
from social_backend.models import Comment, CommentLike, Post, PostLike, User
from social_backend.schemas.common import Page
from social_backend.schemas.post import CommentOut, LikeToggleOut, PostOut
from social_backend.utils.pagination import PageParams
from social_backend.utils.time import to_iso, to_relative_time

logger = logging.getLogger(__name__)

MAX_POST_LENGTH = 5000
MAX_COMMENT_LENGTH = 1000


# ==================== Batched lookups ====================

def _like_counts(
    db: Session,
    item_column: InstrumentedAttribute[int],
    item_ids: list[int],
) -> dict[int, int]:
    """Return ``{item_id: likes}`` for ``item_ids`` in one grouped query."""
    if not item_ids:
        return {}
    rows = (
        db.query(item_column, func.count())
        .filter(item_column.in_(item_ids))
        .group_by(item_column)
        .all()
    )
    return {item_id: count for item_id, count in rows}


def _liked_by_viewer(
    db: Session,
    item_column: InstrumentedAttribute[int],
    user_column: InstrumentedAttribute[int],
    item_ids: list[int],
    viewer_id: int,
) -> set[int]:
    """Return the subset of ``item_ids`` the viewer has liked, in one query."""
    if not item_ids:
        return set()
    rows = db.query(item_column).filter(item_column.in_(item_ids), user_column == viewer_id).all()
    return {item_id for (item_id,) in rows}


def _render_comment(
    comment: Comment,
    author: User,
    *,
    likes: int = 0,
    liked: bool = False,
    now: datetime | None = None,
) -> CommentOut:
    return CommentOut(
        id=str(comment.id),
        username=author.username,
        profile_image=author.profile_image,
        text=comment.text,
        timestamp=to_iso(comment.created_at),
        relative_timestamp=to_relative_time(comment.created_at, now),
        likes=likes,
        liked_by_current_user=liked,
    )


def _render_post(
    post: Post,
    author: User,
    *,
    likes: int = 0,
    liked: bool = False,
    comments: list[CommentOut] | None = None,
    now: datetime | None = None,
) -> PostOut:
    return PostOut(
        id=str(post.id),
        username=author.username,
        profile_image=author.profile_image,
        timestamp=to_iso(post.created_at),
        relative_timestamp=to_relative_time(post.created_at, now),
        text=post.text,
        likes=likes,
        liked_by_current_user=liked,
        comments=comments or [],
    )


def _comments_by_post(
    db: Session,
    viewer: TokenIdentity,
    post_ids: list[int],
    now: datetime,
) -> dict[int, list[CommentOut]]:
    """Fetch and render comments for every post in the page, oldest first."""
    rows = (
        db.query(Comment, User)
        .join(User, Comment.user_id == User.id)
        .filter(Comment.post_id.in_(post_ids))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    comment_ids = [comment.id for comment, _ in rows]
    counts = _like_counts(db, CommentLike.comment_id, comment_ids)
    liked = _liked_by_viewer(db, CommentLike.comment_id, CommentLike.user_id, comment_ids, viewer.id)

    grouped: dict[int, list[CommentOut]] = defaultdict(list)
    for comment, author in rows:
        grouped[comment.post_id].append(
            _render_comment(
                comment,
                author,
                likes=counts.get(comment.id, 0),
                liked=comment.id in liked,
                now=now,
            )
        )
    return grouped


# ==================== Feed ====================

def list_feed(db: Session, viewer: TokenIdentity, *, page: PageParams) -> Page[PostOut]:
    """Return a newest-first page of every post with likes and comments.

    Likes and comments are resolved with a fixed number of batched queries
    for the whole page regardless of its size.
    """
    now = utcnow()
    total = db.query(func.count(Post.id)).scalar() or 0

    rows = (
        db.query(Post, User)
        .join(User, Post.user_id == User.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(page.limit)
        .offset(page.offset)
        .all()
    )
    post_ids = [post.id for post, _ in rows]
    if not post_ids:
        return Page[PostOut](data=[], pagination=page.pagination(total))

    counts = _like_counts(db, PostLike.post_id, post_ids)
    liked = _liked_by_viewer(db, PostLike.post_id, PostLike.user_id, post_ids, viewer.id)
    comments = _comments_by_post(db, viewer, post_ids, now)

    data = [
        _render_post(
            post,
            author,
            likes=counts.get(post.id, 0),
            liked=post.id in liked,
            comments=comments.get(post.id, []),
            now=now,
        )
        for post, author in rows
    ]
    return Page[PostOut](data=data, pagination=page.pagination(total))


# ==================== Writes ====================

def _validate_text(text: str | None, *, label: str, max_length: int) -> str:
    if text is None or not text.strip():
        raise validation_error(f"{label} text is required")
    if len(text) > max_length:
        raise validation_error(f"{label} text must be {max_length} characters or less")
    return text.strip()


def _require_author(db: Session, viewer: TokenIdentity) -> User:
    author = db.get(User, viewer.id)
    if author is None:
        raise ApiError(ErrorCode.INVALID_TOKEN, "Invalid or expired token", {"error": "User no longer exists"})
    return author


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise not_found("Post not found")
    return post


def create_post(db: Session, viewer: TokenIdentity, *, text: str | None) -> PostOut:
    """Publish a post. The length limit applies to the untrimmed input."""
    body = _validate_text(text, label="Post", max_length=MAX_POST_LENGTH)
    author = _require_author(db, viewer)

    post = Post(user_id=author.id, text=body, created_at=utcnow())
    db.add(post)
    db.commit()
    db.refresh(post)

    logger.info("Post id=%s created by user_id=%s", post.id, author.id)
    return _render_post(post, author)


def add_comment(db: Session, viewer: TokenIdentity, *, post_id: int, text: str | None) -> CommentOut:
    """Attach a comment to an existing post."""
    body = _validate_text(text, label="Comment", max_length=MAX_COMMENT_LENGTH)
    post = _get_post_or_404(db, post_id)
    author = _require_author(db, viewer)

    comment = Comment(post_id=post.id, user_id=author.id, text=body, created_at=utcnow())
    db.add(comment)
    db.commit()
    db.refresh(comment)

    logger.info("Comment id=%s added to post_id=%s by user_id=%s", comment.id, post.id, author.id)
    return _render_comment(comment, author)


def _toggle_like(db: Session, like_model: type[PostLike] | type[CommentLike], key: dict[str, Any]) -> bool:
    """Flip the like row identified by ``key`` and return the new state.

    A concurrent duplicate insert by the same user trips the composite
    primary key; that outcome is already "liked", so it is not an error.
    """
    existing = db.query(like_model).filter_by(**key).first()
    if existing is not None:
        db.delete(existing)
        db.commit()
        return False

    db.add(like_model(**key, created_at=utcnow()))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if db.query(like_model).filter_by(**key).first() is None:
            raise
        logger.warning("Duplicate %s insert for %s treated as already liked", like_model.__tablename__, key)
    return True


def toggle_post_like(db: Session, viewer: TokenIdentity, *, post_id: int) -> LikeToggleOut:
    """Like or unlike a post; ``likes`` is recounted after the change."""
    post = _get_post_or_404(db, post_id)

    liked = _toggle_like(db, PostLike, {"post_id": post.id, "user_id": viewer.id})
    likes = db.query(func.count()).select_from(PostLike).filter(PostLike.post_id == post.id).scalar() or 0

    logger.info("Post like toggled post_id=%s user_id=%s liked=%s", post.id, viewer.id, liked)
    return LikeToggleOut(liked=liked, likes=likes)


def toggle_comment_like(
    db: Session,
    viewer: TokenIdentity,
    *,
    post_id: int,
    comment_id: int,
) -> LikeToggleOut:
    """Like or unlike a comment that must belong to ``post_id``."""
    comment = (
        db.query(Comment)
        .filter(Comment.id == comment_id, Comment.post_id == post_id)
        .first()
    )
    if comment is None:
        raise not_found("Post or comment not found")

    liked = _toggle_like(db, CommentLike, {"comment_id": comment.id, "user_id": viewer.id})
    likes = (
        db.query(func.count())
        .select_from(CommentLike)
        .filter(CommentLike.comment_id == comment.id)
        .scalar()
        or 0
    )

    logger.info("Comment like toggled comment_id=%s user_id=%s liked=%s", comment.id, viewer.id, liked)
    return LikeToggleOut(liked=liked, likes=likes)
