"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base model rendering snake_case attributes as camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(ApiModel):
    """Offset pagination metadata echoed on list endpoints."""

    total: int = Field(..., description="Number of items matching the filters, ignoring paging")
    limit: int = Field(..., description="Effective page size")
    offset: int = Field(..., description="Effective number of skipped items")


class Page(ApiModel, Generic[T]):
    """List envelope: ``{data: [...], pagination: {...}}``."""

    data: list[T]
    pagination: Pagination


class DataEnvelope(ApiModel, Generic[T]):
    """Single resource wrapped as ``{data: ...}``."""

    data: T


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | list[Any] | None = None


class ErrorEnvelope(BaseModel):
    """Error envelope returned for every failure."""

    error: ErrorBody
