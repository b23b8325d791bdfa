"""
Storage interface shared by the SQL and in-memory stores.

Routers and services only talk to ``ContentStore``; which implementation
backs it is decided by ``settings.storage_backend``.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from poprev.models.user import Role
from poprev.schemas.category import CategoryCreate, CategoryRead, CategorySummary, CategoryUpdate
from poprev.schemas.common import SortOrder
from poprev.schemas.response import ResponseCreate, ResponseDetail, ResponseSummary, ResponseUpdate
from poprev.schemas.auth import UserCredentials, UserRead
from poprev.services.search_service import SearchQuery


@dataclass
class ResponseQuery:
    """Filters and paging for response listings."""
    page: int = 1
    limit: int = 10
    sort: SortOrder = SortOrder.newest
    category: Optional[str] = None  # id or slug
    tag: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class ResponsePage:
    items: List[ResponseSummary]
    total: int


def responses_in_use_message(count: int) -> str:
    return f"Cannot delete category that is used in {count} responses"


def children_message(count: int) -> str:
    return f"Cannot delete category that is a parent for {count} other categories"


def creates_cycle(
    category_id: str,
    new_parent_id: Optional[str],
    parent_of: Callable[[str], Optional[str]],
) -> bool:
    """True when making ``new_parent_id`` the parent would loop back to ``category_id``."""
    seen = set()
    current = new_parent_id
    while current is not None and current not in seen:
        if current == category_id:
            return True
        seen.add(current)
        current = parent_of(current)
    return False


class ContentStore(Protocol):
    """Persistence for categories, responses and users."""

    # Categories

    def list_categories(self, with_counts: bool = False) -> List[CategorySummary]:
        ...

    def get_category(self, category_id: str) -> Optional[CategoryRead]:
        ...

    def find_category(self, id_or_slug: str) -> Optional[CategoryRead]:
        ...

    def create_category(self, data: CategoryCreate) -> CategoryRead:
        ...

    def update_category(self, category_id: str, data: CategoryUpdate) -> CategoryRead:
        ...

    def delete_category(self, category_id: str) -> None:
        """Delete unless responses or child categories still point at it."""
        ...

    # Responses

    def list_responses(self, query: ResponseQuery) -> ResponsePage:
        ...

    def get_response(self, response_id: str) -> Optional[ResponseDetail]:
        ...

    def create_response(self, data: ResponseCreate, author: str) -> ResponseDetail:
        ...

    def update_response(self, response_id: str, data: ResponseUpdate) -> ResponseDetail:
        ...

    def delete_response(self, response_id: str) -> None:
        ...

    def search_responses(self, query: SearchQuery, limit: int) -> List[ResponseSummary]:
        ...

    # Users

    def get_user(self, user_id: str) -> Optional[UserRead]:
        ...

    def get_user_credentials(self, email: str) -> Optional[UserCredentials]:
        ...

    def create_user(self, name: str, email: str, password_hash: str, role: Role) -> UserRead:
        ...

    def update_user(self, user_id: str, **fields) -> UserRead:
        ...

    def record_login(self, user_id: str) -> UserRead:
        ...
