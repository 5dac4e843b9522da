"""Registration and credential verification."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from social_backend.core.errors import ApiError, ErrorCode, validation_error
from social_backend.core.security import create_access_token, hash_password, verify_password
from social_backend.core.settings import settings
from social_backend.models import User
from social_backend.models.user import PRESENCE_ONLINE
from social_backend.schemas.auth import AuthResponse, PublicUser

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def normalize_username(username: str) -> str:
    """Return the canonical (trimmed, lowercase) form of a username."""
    return username.strip().lower()


def find_user_by_username(db: Session, username: str) -> User | None:
    """Look up a user by username in any letter case.

    Stored usernames are already lowercase, so the unique index serves the lookup.
    """
    normalized = normalize_username(username)
    return db.query(User).filter(User.username == normalized).first()


def _require_credentials(username: str | None, password: str | None) -> tuple[str, str]:
    if not username or not password:
        raise validation_error("Username and password are required")
    return username, password


def _issue(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id, user.username),
        user=PublicUser(**user.public_view()),
    )


def register_user(db: Session, *, username: str | None, password: str | None) -> AuthResponse:
    """Create an account and return a fresh token for it.

    Raises:
        ApiError: ``validation_error`` for short or missing credentials,
            ``username_taken`` when the name exists in any letter case.
    """
    username, password = _require_credentials(username, password)
    normalized = normalize_username(username)

    if len(normalized) < MIN_USERNAME_LENGTH:
        raise validation_error(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise validation_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if find_user_by_username(db, normalized) is not None:
        raise ApiError(ErrorCode.USERNAME_TAKEN, "Username is already taken")

    user = User(
        username=normalized,
        password_hash=hash_password(password),
        profile_image=settings.default_profile_image,
        status=PRESENCE_ONLINE,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        # Concurrent registration won the unique index.
        db.rollback()
        raise ApiError(ErrorCode.USERNAME_TAKEN, "Username is already taken") from err
    db.refresh(user)

    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return _issue(user)


def authenticate_user(db: Session, *, username: str | None, password: str | None) -> AuthResponse:
    """Verify credentials and return a fresh token.

    Unknown usernames and wrong passwords fail identically.
    """
    username, password = _require_credentials(username, password)

    user = find_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for username=%s", normalize_username(username))
        raise ApiError(ErrorCode.INVALID_CREDENTIALS, "Invalid username or password")

    return _issue(user)
