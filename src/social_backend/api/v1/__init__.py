# src/social_backend/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    friends_router,
    posts_router,
    system_router,
)

__all__ = [
    "auth_router",
    "friends_router",
    "posts_router",
    "system_router",
]
