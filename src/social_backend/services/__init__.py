# src/social_backend/services/__init__.py
"""Business logic services for the social backend."""

from . import feed, identity, relationships

__all__ = ["feed", "identity", "relationships"]
