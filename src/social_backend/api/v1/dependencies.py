"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from social_backend.core.errors import ApiError, ErrorCode, not_found
from social_backend.core.security import TokenIdentity, decode_access_token
from social_backend.db.session import get_db
from social_backend.utils.pagination import PageParams, parse_page_params

BEARER_PREFIX = "Bearer "

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        ApiError: ``unauthorized`` when the header is missing or malformed.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise ApiError(
            ErrorCode.UNAUTHORIZED,
            "Missing or invalid authorization header",
            {"expected": "Authorization: Bearer <token>"},
        )
    return authorization[len(BEARER_PREFIX):].strip()


def get_current_user(request: Request) -> TokenIdentity:
    """Authenticate the request and return the caller's identity.

    This is the only authorization gate; every protected route depends on it.

    Raises:
        ApiError: ``unauthorized`` for a missing/malformed header,
            ``invalid_token`` for a bad signature, expiry or claims.
    """
    token = _extract_bearer_token(request.headers.get("Authorization"))
    return decode_access_token(token)


# Type alias for current user dependency
CurrentUserDep = Annotated[TokenIdentity, Depends(get_current_user)]


def get_page_params(
    limit: Annotated[str | None, Query(description="Page size (default 20, max 100)")] = None,
    offset: Annotated[str | None, Query(description="Items to skip (default 0)")] = None,
) -> PageParams:
    """Parse ``limit``/``offset`` leniently; bad values fall back to defaults."""
    return parse_page_params(limit, offset)


PageDep = Annotated[PageParams, Depends(get_page_params)]


def parse_resource_id(raw: str, message: str) -> int:
    """Convert a path segment to an integer id.

    A non-numeric id cannot name an existing row, so it is reported as
    ``not_found`` with the caller's message.
    """
    try:
        value = int(raw)
    except ValueError as err:
        raise not_found(message) from err
    if value <= 0:
        raise not_found(message)
    return value
