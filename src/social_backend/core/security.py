"""Credential hashing and bearer token helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from social_backend.core.errors import ApiError, ErrorCode
from social_backend.core.settings import settings
from social_backend.db.time import utcnow

# bcrypt only consumes the first 72 bytes of a secret.
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried by a verified access token."""

    id: int
    username: str


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash for ``password``."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check ``password`` against a stored hash.

    Accounts without a stored hash (seeded profiles) never verify.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))
    except ValueError:
        return False


def create_access_token(user_id: int, username: str) -> str:
    """Create a signed access token for ``user_id``."""
    issued_at = utcnow()
    claims: dict[str, object] = {
        "sub": str(user_id),
        "username": username,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.access_token_expire_minutes),
    }
    encoded_jwt: str = jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> TokenIdentity:
    """Validate signature and expiry and return the carried identity.

    Raises:
        ApiError: ``invalid_token`` for any signature, expiry or claim failure.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as err:
        raise ApiError(
            ErrorCode.INVALID_TOKEN,
            "Invalid or expired token",
            {"error": "Signature has expired"},
        ) from err
    except JWTError as err:
        raise ApiError(ErrorCode.INVALID_TOKEN, "Invalid or expired token", {"error": str(err)}) from err

    subject = payload.get("sub")
    username = payload.get("username")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as err:
        raise ApiError(
            ErrorCode.INVALID_TOKEN,
            "Invalid or expired token",
            {"error": "Token subject is not a user id"},
        ) from err
    if not isinstance(username, str) or not username:
        raise ApiError(
            ErrorCode.INVALID_TOKEN,
            "Invalid or expired token",
            {"error": "Token is missing the username claim"},
        )
    return TokenIdentity(id=user_id, username=username)
