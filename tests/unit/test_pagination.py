# tests/unit/test_pagination.py
"""Tests for lenient limit/offset parsing."""

import pytest

from social_backend.utils.pagination import PageParams, parse_page_params


def test_defaults_when_absent() -> None:
    params = parse_page_params(None, None)
    assert params == PageParams(limit=20, offset=0)


@pytest.mark.parametrize(
    ("raw_limit", "raw_offset", "expected"),
    [
        ("5", "10", PageParams(limit=5, offset=10)),
        ("abc", "xyz", PageParams(limit=20, offset=0)),
        ("", " ", PageParams(limit=20, offset=0)),
        ("500", "0", PageParams(limit=100, offset=0)),
        ("-3", "-7", PageParams(limit=0, offset=0)),
        ("0", "2", PageParams(limit=0, offset=2)),
        ("7.9", "3.2", PageParams(limit=7, offset=3)),
        ("inf", "nan", PageParams(limit=20, offset=0)),
    ],
)
def test_parsing_and_clamping(raw_limit: str, raw_offset: str, expected: PageParams) -> None:
    assert parse_page_params(raw_limit, raw_offset) == expected


def test_explicit_bounds_override_settings() -> None:
    params = parse_page_params(None, None, default_limit=3, max_limit=4)
    assert params.limit == 3
    assert parse_page_params("9", None, default_limit=3, max_limit=4).limit == 4


def test_slice_applies_window() -> None:
    items = list(range(10))
    assert PageParams(limit=3, offset=8).slice(items) == [8, 9]
    assert PageParams(limit=3, offset=20).slice(items) == []


def test_pagination_echoes_effective_values() -> None:
    pagination = PageParams(limit=5, offset=15).pagination(42)
    assert pagination.model_dump(by_alias=True) == {"total": 42, "limit": 5, "offset": 15}
