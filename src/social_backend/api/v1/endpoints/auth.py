# src/social_backend/api/v1/endpoints/auth.py
"""Authentication endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from social_backend.api.v1.dependencies import SessionDep
from social_backend.schemas.auth import AuthResponse, CredentialsRequest
from social_backend.schemas.common import ErrorEnvelope
from social_backend.services import identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    summary="Register a new user",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorEnvelope, "description": "Validation error"},
        409: {"model": ErrorEnvelope, "description": "Username already taken"},
    },
)
def register_user(payload: CredentialsRequest, db: SessionDep) -> AuthResponse:
    """Create an account and return a bearer token for it."""
    return identity.register_user(db, username=payload.username, password=payload.password)


@router.post(
    "/login",
    summary="Login and get a bearer token",
    response_model=AuthResponse,
    responses={401: {"model": ErrorEnvelope, "description": "Invalid credentials"}},
)
def login_user(payload: CredentialsRequest, db: SessionDep) -> AuthResponse:
    """Exchange a username and password for a fresh token."""
    return identity.authenticate_user(db, username=payload.username, password=payload.password)
