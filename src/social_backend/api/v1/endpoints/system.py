"""Operational endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from social_backend.core.settings import settings
from social_backend.db.time import utcnow
from social_backend.utils.time import to_iso

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok", "timestamp": to_iso(utcnow())}


@router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }
