"""
Response Pydantic schemas for API validation.
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import List, Optional

from poprev.schemas.common import ApiModel, strip_required


class Reference(ApiModel):
    """Citation of a paper/section/paragraph with the quoted text."""
    paper: int = Field(..., ge=0)
    section: int = Field(..., ge=0)
    paragraph: int = Field(..., ge=0)
    quote: str = Field(..., min_length=1)


class CategoryRef(ApiModel):
    """Category display data resolved onto a response."""
    id: str
    name: str
    slug: str


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _not_blank(value: Optional[str], label: str) -> Optional[str]:
    # Answer bodies are HTML, so the value is kept as sent
    if value is not None and not value.strip():
        raise ValueError(f"{label} must not be blank")
    return value


def _unique_ids(ids: Optional[List[str]]) -> Optional[List[str]]:
    if ids is None:
        return None
    return list(dict.fromkeys(ids))


class ResponseCreate(ApiModel):
    """
    Schema for creating a response.

    There is no author field: the author is always the signed-in user.
    """
    title: str = Field(..., min_length=1, max_length=255)
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    excerpt: str = Field(..., min_length=1)
    references: List[Reference] = []
    categories: List[str] = []
    tags: List[str] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        return strip_required(v, "title")

    @field_validator("question", "answer", "excerpt")
    @classmethod
    def not_blank(cls, v, info):
        return _not_blank(v, info.field_name)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)

    @field_validator("categories")
    @classmethod
    def unique_categories(cls, v):
        return _unique_ids(v)


class ResponseUpdate(ApiModel):
    """Partial update; arrays, when given, replace the stored ones."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    question: Optional[str] = Field(None, min_length=1)
    answer: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, min_length=1)
    references: Optional[List[Reference]] = None
    categories: Optional[List[str]] = None
    tags: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        return strip_required(v, "title")

    @field_validator("question", "answer", "excerpt")
    @classmethod
    def not_blank(cls, v, info):
        return _not_blank(v, info.field_name)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)

    @field_validator("categories")
    @classmethod
    def unique_categories(cls, v):
        return _unique_ids(v)


class ResponseSummary(ApiModel):
    """List view of a response; never carries the answer body."""
    id: str
    title: str
    question: str
    excerpt: str
    categories: List[CategoryRef] = []
    tags: List[str] = []
    created_at: datetime


class ResponseDetail(ResponseSummary):
    """Full response record."""
    answer: str
    references: List[Reference] = []
    author: str
    pdf_url: Optional[str] = None
    updated_at: datetime

    def summary(self) -> ResponseSummary:
        return ResponseSummary(**{name: getattr(self, name) for name in ResponseSummary.model_fields})


class PdfExport(ApiModel):
    title: str
    pdf_url: str


class PdfExportResponse(ApiModel):
    success: bool = True
    message: str
    data: PdfExport
