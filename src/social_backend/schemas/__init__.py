# src/social_backend/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import AuthResponse, CredentialsRequest, PublicUser
from .common import DataEnvelope, ErrorEnvelope, Page, Pagination
from .friends import (
    DeclinedRequestOut,
    FriendOut,
    FriendRequestCreate,
    FriendRequestOut,
    SuggestionOut,
)
from .post import CommentCreate, CommentOut, LikeToggleOut, PostCreate, PostOut

__all__ = [
    "AuthResponse", "CredentialsRequest", "PublicUser",
    "DataEnvelope", "ErrorEnvelope", "Page", "Pagination",
    "DeclinedRequestOut", "FriendOut", "FriendRequestCreate", "FriendRequestOut", "SuggestionOut",
    "CommentCreate", "CommentOut", "LikeToggleOut", "PostCreate", "PostOut",
]
