# src/social_backend/main.py
"""Main entry point for the social backend application."""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from social_backend.api.v1 import (
    auth_router,
    friends_router,
    posts_router,
    system_router,
)
from social_backend.core.errors import ApiError, ErrorCode, not_found
from social_backend.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Social feed API with friends, posts, comments and likes",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(friends_router)
app.include_router(posts_router)


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return exc.to_response()


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and parameters as ``validation_error``."""
    errors = jsonable_encoder(exc.errors())
    return ApiError(ErrorCode.VALIDATION_ERROR, "Invalid request", errors).to_response()


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return not_found("Route not found").to_response()
    code = ErrorCode.INTERNAL_SERVER_ERROR if exc.status_code >= 500 else ErrorCode.VALIDATION_ERROR
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": code.value, "message": str(exc.detail)}},
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    details = {"stack": "".join(traceback.format_exception(exc))} if settings.debug else None
    return ApiError(
        ErrorCode.INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        details,
    ).to_response()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("social_backend.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
