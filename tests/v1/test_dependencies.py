# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

import pytest
from starlette.requests import Request

from social_backend.api.v1.dependencies import (
    get_current_user,
    get_page_params,
    parse_resource_id,
)
from social_backend.core.errors import ApiError, ErrorCode
from social_backend.core.security import TokenIdentity, create_access_token


def _request(headers: dict[str, str]) -> Request:
    raw = [(name.lower().encode(), value.encode()) for name, value in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestGetCurrentUser:
    def test_valid_bearer_token(self) -> None:
        token = create_access_token(7, "alice")
        identity = get_current_user(_request({"Authorization": f"Bearer {token}"}))
        assert identity == TokenIdentity(id=7, username="alice")

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "bearer abc", "Token abc"])
    def test_missing_or_malformed_header(self, header: str | None) -> None:
        headers = {} if header is None else {"Authorization": header}
        with pytest.raises(ApiError) as exc_info:
            get_current_user(_request(headers))
        assert exc_info.value.code is ErrorCode.UNAUTHORIZED

    def test_empty_token_is_invalid(self) -> None:
        with pytest.raises(ApiError) as exc_info:
            get_current_user(_request({"Authorization": "Bearer "}))
        assert exc_info.value.code is ErrorCode.INVALID_TOKEN


class TestParseResourceId:
    def test_numeric_id(self) -> None:
        assert parse_resource_id("42", "Post not found") == 42

    @pytest.mark.parametrize("raw", ["abc", "1.5", "", "0", "-3"])
    def test_unusable_ids_are_not_found(self, raw: str) -> None:
        with pytest.raises(ApiError) as exc_info:
            parse_resource_id(raw, "Post not found")
        assert exc_info.value.code is ErrorCode.NOT_FOUND
        assert exc_info.value.message == "Post not found"


def test_page_params_dependency_is_lenient() -> None:
    params = get_page_params(limit="lots", offset="3")
    assert (params.limit, params.offset) == (20, 3)
