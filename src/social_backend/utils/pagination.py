"""Lenient parsing of ``limit``/``offset`` query values."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

from social_backend.core.settings import settings
from social_backend.schemas.common import Pagination

T = TypeVar("T")


@dataclass(frozen=True)
class PageParams:
    """Effective page window after defaults and clamping."""

    limit: int
    offset: int

    def pagination(self, total: int) -> Pagination:
        return Pagination(total=total, limit=self.limit, offset=self.offset)

    def slice(self, items: Sequence[T]) -> list[T]:
        """Apply the window to an already materialised, ordered sequence."""
        return list(items[self.offset:self.offset + self.limit])


def _parse_int(raw: str | int | None, default: int) -> int:
    if raw is None:
        return default
    if isinstance(raw, int):
        return raw
    text = raw.strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return default
    if not math.isfinite(value):
        return default
    return int(value)


def parse_page_params(
    raw_limit: str | int | None,
    raw_offset: str | int | None,
    *,
    default_limit: int | None = None,
    max_limit: int | None = None,
) -> PageParams:
    """Turn raw query values into a :class:`PageParams`.

    Non-numeric values fall back to the defaults instead of failing. ``limit``
    is clamped to ``[0, max_limit]`` and ``offset`` is floored at zero.
    """
    default_limit = settings.default_page_limit if default_limit is None else default_limit
    max_limit = settings.max_page_limit if max_limit is None else max_limit

    limit = min(max(_parse_int(raw_limit, default_limit), 0), max_limit)
    offset = max(_parse_int(raw_offset, 0), 0)
    return PageParams(limit=limit, offset=offset)
