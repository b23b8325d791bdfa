"""
Category Pydantic schemas for API validation.
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import List, Optional

from poprev.schemas.common import ApiModel, Pagination, strip_required
from poprev.schemas.response import ResponseSummary


def normalize_slug(value: Optional[str]) -> Optional[str]:
    value = strip_required(value, "slug")
    return value.lower() if value is not None else None


class CategoryBase(ApiModel):
    """Base category schema."""
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, max_length=100)
    parent_category: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, v, info):
        return strip_required(v, info.field_name)

    @field_validator("slug")
    @classmethod
    def lower_slug(cls, v):
        return normalize_slug(v)


class CategoryCreate(CategoryBase):
    """Schema for creating a category."""
    pass


class CategoryUpdate(ApiModel):
    """Schema for updating a category. An explicit null parent detaches it."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    parent_category: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, v, info):
        return strip_required(v, info.field_name)

    @field_validator("slug")
    @classmethod
    def lower_slug(cls, v):
        return normalize_slug(v)


class CategorySummary(ApiModel):
    """Display fields used by listings."""
    id: str
    name: str
    description: str
    slug: str
    count: Optional[int] = None


class CategoryRead(ApiModel):
    """Full category record."""
    id: str
    name: str
    description: str
    slug: str
    parent_category: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def summary(self) -> CategorySummary:
        return CategorySummary(
            id=self.id,
            name=self.name,
            description=self.description,
            slug=self.slug,
        )


class CategoryResponsesPage(ApiModel):
    """Responses filed under one category."""
    success: bool = True
    category: CategorySummary
    data: List[ResponseSummary]
    pagination: Pagination
