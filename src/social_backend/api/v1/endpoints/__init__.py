# src/social_backend/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .friends import router as friends_router
from .posts import router as posts_router
from .system import router as system_router

__all__ = [
    "auth_router",
    "friends_router",
    "posts_router",
    "system_router",
]
