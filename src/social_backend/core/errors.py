"""Error taxonomy shared by services, dependencies and exception handlers.

Every failure a client can observe is an :class:`ApiError` carrying one of the
closed set of :class:`ErrorCode` values. The HTTP status is derived from the
code, never chosen at the raise site.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope."""

    VALIDATION_ERROR = "validation_error"
    UNAUTHORIZED = "unauthorized"
    INVALID_TOKEN = "invalid_token"
    INVALID_CREDENTIALS = "invalid_credentials"
    USERNAME_TAKEN = "username_taken"
    NOT_FOUND = "not_found"
    USER_NOT_FOUND = "user_not_found"
    ALREADY_FRIENDS = "already_friends"
    REQUEST_ALREADY_SENT = "request_already_sent"
    REQUEST_EXISTS = "request_exists"
    INTERNAL_SERVER_ERROR = "internal_server_error"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_CODE[self]


_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_FRIENDS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REQUEST_ALREADY_SENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REQUEST_EXISTS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USERNAME_TAKEN: status.HTTP_409_CONFLICT,
    ErrorCode.INTERNAL_SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(Exception):
    """Base exception for every client-visible failure."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return self.code.status_code

    def to_envelope(self) -> dict[str, Any]:
        """Return the ``{"error": {...}}`` body for this error."""
        body: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return {"error": body}

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_envelope())

    def __repr__(self) -> str:
        return f"ApiError(code={self.code.value!r}, message={self.message!r})"


def validation_error(message: str, details: dict[str, Any] | list[Any] | None = None) -> ApiError:
    return ApiError(ErrorCode.VALIDATION_ERROR, message, details)


def not_found(message: str) -> ApiError:
    return ApiError(ErrorCode.NOT_FOUND, message)
