"""
Shared envelope and pagination schemas.

Every body the API returns carries ``success`` plus ``data`` or ``message``.
Keys are camelCase on the wire; request bodies accept either spelling.
"""

import enum
import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base schema: camelCase aliases, populated by field name too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def strip_required(value: Optional[str], label: str) -> Optional[str]:
    """Strip surrounding whitespace and refuse what is left if it is empty."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError(f"{label} must not be blank")
    return value


class SortOrder(str, enum.Enum):
    """Sort keys accepted by list endpoints."""
    newest = "newest"
    oldest = "oldest"
    az = "az"
    za = "za"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOrder":
        """Unknown or missing keys fall back to newest-first."""
        try:
            return cls(value)
        except ValueError:
            return cls.newest


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_more=page < total_pages,
        )


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    data: T


class ListEnvelope(ApiModel, Generic[T]):
    success: bool = True
    count: int
    data: List[T]


class PageEnvelope(ApiModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination


class MessageResponse(ApiModel):
    success: bool = True
    message: str
