"""
Response API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from poprev.config import settings
from poprev.dependencies import get_store, require_admin, require_editor
from poprev.errors import BadRequestError, NotFoundError
from poprev.schemas.auth import UserRead
from poprev.schemas.common import (
    Envelope,
    ListEnvelope,
    MessageResponse,
    PageEnvelope,
    Pagination,
    SortOrder,
)
from poprev.schemas.response import (
    PdfExport,
    PdfExportResponse,
    ResponseCreate,
    ResponseDetail,
    ResponseSummary,
    ResponseUpdate,
)
from poprev.services.search_service import parse_query
from poprev.store import ContentStore, ResponseQuery

router = APIRouter()


def list_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort: Optional[str] = None,
) -> ResponseQuery:
    """Paging and sort shared by every response listing."""
    return ResponseQuery(page=page, limit=limit, sort=SortOrder.parse(sort))


@router.get("", response_model=PageEnvelope[ResponseSummary])
def list_responses(
    params: ResponseQuery = Depends(list_params),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    store: ContentStore = Depends(get_store)
):
    """List responses with filtering, sorting and pagination."""
    params.category = category or None
    params.tag = tag or None
    result = store.list_responses(params)

    return PageEnvelope[ResponseSummary](
        data=result.items,
        pagination=Pagination.build(params.page, params.limit, result.total)
    )


@router.get("/search", response_model=ListEnvelope[ResponseSummary])
def search_responses(
    q: Optional[str] = None,
    store: ContentStore = Depends(get_store)
):
    """Relevance-ranked full-text search over title, question and answer."""
    if not q or not q.strip():
        raise BadRequestError("Please provide a search term")

    results = store.search_responses(parse_query(q), settings.search_result_limit)
    return ListEnvelope[ResponseSummary](count=len(results), data=results)


@router.get("/{response_id}", response_model=Envelope[ResponseDetail])
def get_response(
    response_id: str,
    store: ContentStore = Depends(get_store)
):
    """Get a single response with its categories resolved."""
    response = store.get_response(response_id)
    if not response:
        raise NotFoundError("Response not found")
    return Envelope[ResponseDetail](data=response)


@router.get("/{response_id}/pdf", response_model=PdfExportResponse)
def export_pdf(
    response_id: str,
    store: ContentStore = Depends(get_store)
):
    """Placeholder for PDF export; reports where the file would live."""
    response = store.get_response(response_id)
    if not response:
        raise NotFoundError("Response not found")

    return PdfExportResponse(
        message="PDF generation is not implemented yet",
        data=PdfExport(
            title=response.title,
            pdf_url=f"{settings.pdf_base_path.rstrip('/')}/{response.id}.pdf"
        )
    )


@router.post("", response_model=Envelope[ResponseDetail], status_code=201)
def create_response(
    response: ResponseCreate,
    user: UserRead = Depends(require_editor),
    store: ContentStore = Depends(get_store)
):
    """Create a response authored by the signed-in user."""
    created = store.create_response(response, author=user.name)
    return Envelope[ResponseDetail](data=created)


@router.put("/{response_id}", response_model=Envelope[ResponseDetail])
def update_response(
    response_id: str,
    response_update: ResponseUpdate,
    user: UserRead = Depends(require_editor),
    store: ContentStore = Depends(get_store)
):
    """Update a response; omitted fields keep their values."""
    updated = store.update_response(response_id, response_update)
    return Envelope[ResponseDetail](data=updated)


@router.delete("/{response_id}", response_model=MessageResponse)
def delete_response(
    response_id: str,
    user: UserRead = Depends(require_admin),
    store: ContentStore = Depends(get_store)
):
    """Delete a response."""
    store.delete_response(response_id)
    return MessageResponse(message="Response deleted successfully")
