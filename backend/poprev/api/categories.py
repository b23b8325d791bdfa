"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends, Query

from poprev.api.responses import list_params
from poprev.dependencies import get_store, require_admin, require_editor
from poprev.errors import NotFoundError
from poprev.schemas.auth import UserRead
from poprev.schemas.category import (
    CategoryCreate,
    CategoryRead,
    CategoryResponsesPage,
    CategorySummary,
    CategoryUpdate,
)
from poprev.schemas.common import Envelope, ListEnvelope, MessageResponse, Pagination
from poprev.store import ContentStore, ResponseQuery

router = APIRouter()


@router.get("", response_model=ListEnvelope[CategorySummary], response_model_exclude_none=True)
def list_categories(
    with_count: bool = Query(False, alias="withCount"),
    store: ContentStore = Depends(get_store)
):
    """List all categories alphabetically, optionally with response counts."""
    categories = store.list_categories(with_counts=with_count)
    return ListEnvelope[CategorySummary](count=len(categories), data=categories)


@router.post("", response_model=Envelope[CategoryRead], status_code=201)
def create_category(
    category: CategoryCreate,
    user: UserRead = Depends(require_editor),
    store: ContentStore = Depends(get_store)
):
    """Create a new category."""
    return Envelope[CategoryRead](data=store.create_category(category))


@router.get("/{category_id}", response_model=Envelope[CategoryRead])
def get_category(
    category_id: str,
    store: ContentStore = Depends(get_store)
):
    """Get a specific category."""
    category = store.get_category(category_id)
    if not category:
        raise NotFoundError("Category not found")
    return Envelope[CategoryRead](data=category)


@router.get("/{category_id}/responses", response_model=CategoryResponsesPage, response_model_exclude_none=True)
def get_category_responses(
    category_id: str,
    params: ResponseQuery = Depends(list_params),
    store: ContentStore = Depends(get_store)
):
    """Paginated responses filed under one category."""
    category = store.get_category(category_id)
    if not category:
        raise NotFoundError("Category not found")

    params.category = category.id
    result = store.list_responses(params)

    return CategoryResponsesPage(
        category=category.summary(),
        data=result.items,
        pagination=Pagination.build(params.page, params.limit, result.total)
    )


@router.put("/{category_id}", response_model=Envelope[CategoryRead])
def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    user: UserRead = Depends(require_editor),
    store: ContentStore = Depends(get_store)
):
    """Update a category."""
    return Envelope[CategoryRead](data=store.update_category(category_id, category_update))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    user: UserRead = Depends(require_admin),
    store: ContentStore = Depends(get_store)
):
    """Delete a category that no response or child category refers to."""
    store.delete_category(category_id)
    return MessageResponse(message="Category deleted successfully")
