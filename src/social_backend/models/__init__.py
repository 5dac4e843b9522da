# src/social_backend/models/__init__.py
"""SQLAlchemy models for the social backend."""

from .friendship import FriendRequest, Friendship, FriendSuggestion
from .like import CommentLike, PostLike
from .post import Comment, Post
from .user import User

__all__ = [
    "User",
    "Friendship", "FriendSuggestion", "FriendRequest",
    "Post", "Comment",
    "PostLike", "CommentLike",
]
