"""
In-memory content store for local development and tests.

State is process-wide and every operation holds one re-entrant lock, so it
behaves correctly for a single process only. Never point production at it.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from poprev.errors import BadRequestError, ConflictError, NotFoundError
from poprev.models.user import Role
from poprev.schemas.auth import UserCredentials, UserRead
from poprev.schemas.category import CategoryCreate, CategoryRead, CategorySummary, CategoryUpdate
from poprev.schemas.common import SortOrder
from poprev.schemas.response import (
    CategoryRef,
    Reference,
    ResponseCreate,
    ResponseDetail,
    ResponseSummary,
    ResponseUpdate,
)
from poprev.services.search_service import SearchQuery, rank
from poprev.store.base import (
    ResponsePage,
    ResponseQuery,
    children_message,
    creates_cycle,
    responses_in_use_message,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CategoryRow:
    name: str
    description: str
    slug: str
    parent_id: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class ResponseRow:
    title: str
    question: str
    answer: str
    excerpt: str
    references: List[dict] = field(default_factory=list)
    category_ids: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    author: str = "Anonymous"
    pdf_url: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class UserRow:
    name: str
    email: str
    password_hash: str
    role: Role = Role.viewer
    is_active: bool = True
    last_login: Optional[datetime] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


class InMemoryContentStore:
    """Dict-backed store; insertion order is the storage order."""

    def __init__(self):
        self._lock = threading.RLock()
        self.categories: Dict[str, CategoryRow] = {}
        self.responses: Dict[str, ResponseRow] = {}
        self.users: Dict[str, UserRow] = {}

    def reset(self) -> None:
        with self._lock:
            self.categories.clear()
            self.responses.clear()
            self.users.clear()

    # Conversions

    def _category_read(self, row: CategoryRow) -> CategoryRead:
        return CategoryRead(
            id=row.id,
            name=row.name,
            description=row.description,
            slug=row.slug,
            parent_category=row.parent_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _summary(self, row: ResponseRow) -> ResponseSummary:
        refs = [
            CategoryRef(id=c.id, name=c.name, slug=c.slug)
            for c in (self.categories.get(cid) for cid in row.category_ids)
            if c is not None
        ]
        refs.sort(key=lambda ref: ref.name)
        return ResponseSummary(
            id=row.id,
            title=row.title,
            question=row.question,
            excerpt=row.excerpt,
            categories=refs,
            tags=list(row.tags),
            created_at=row.created_at,
        )

    def _detail(self, row: ResponseRow) -> ResponseDetail:
        summary = self._summary(row)
        return ResponseDetail(
            **{name: getattr(summary, name) for name in ResponseSummary.model_fields},
            answer=row.answer,
            references=[Reference(**ref) for ref in row.references],
            author=row.author,
            pdf_url=row.pdf_url,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _user_read(row: UserRow) -> UserRead:
        return UserRead(
            id=row.id,
            name=row.name,
            email=row.email,
            role=row.role,
            is_active=row.is_active,
            last_login=row.last_login,
            created_at=row.created_at,
        )

    # Categories

    def _parent_of(self, category_id: str) -> Optional[str]:
        row = self.categories.get(category_id)
        return row.parent_id if row else None

    def list_categories(self, with_counts: bool = False) -> List[CategorySummary]:
        with self._lock:
            rows = sorted(self.categories.values(), key=lambda c: c.name)
            result = []
            for c in rows:
                count = None
                if with_counts:
                    count = sum(1 for r in self.responses.values() if c.id in r.category_ids)
                result.append(CategorySummary(id=c.id, name=c.name, description=c.description, slug=c.slug, count=count))
            return result

    def get_category(self, category_id: str) -> Optional[CategoryRead]:
        with self._lock:
            row = self.categories.get(category_id)
            return self._category_read(row) if row else None

    def find_category(self, id_or_slug: str) -> Optional[CategoryRead]:
        with self._lock:
            row = self.categories.get(id_or_slug)
            if not row:
                slug = id_or_slug.strip().lower()
                row = next((c for c in self.categories.values() if c.slug == slug), None)
            return self._category_read(row) if row else None

    def create_category(self, data: CategoryCreate) -> CategoryRead:
        with self._lock:
            if any(c.name == data.name or c.slug == data.slug for c in self.categories.values()):
                raise ConflictError("Category with this name or slug already exists")

            parent_id = data.parent_category or None
            if parent_id and parent_id not in self.categories:
                raise NotFoundError("Parent category not found")

            row = CategoryRow(name=data.name, description=data.description, slug=data.slug, parent_id=parent_id)
            self.categories[row.id] = row
            logger.info(f"Created category {row.id} ({row.slug})")
            return self._category_read(row)

    def update_category(self, category_id: str, data: CategoryUpdate) -> CategoryRead:
        with self._lock:
            row = self.categories.get(category_id)
            if not row:
                raise NotFoundError("Category not found")

            fields = data.model_dump(exclude_unset=True)
            others = [c for c in self.categories.values() if c.id != row.id]

            if data.slug and data.slug != row.slug and any(c.slug == data.slug for c in others):
                raise ConflictError("Category with this slug already exists")
            if data.name and data.name != row.name and any(c.name == data.name for c in others):
                raise ConflictError("Category with this name already exists")

            parent_id = row.parent_id
            if "parent_category" in fields:
                parent_id = fields["parent_category"] or None
                if parent_id:
                    if parent_id not in self.categories:
                        raise NotFoundError("Parent category not found")
                    if creates_cycle(row.id, parent_id, self._parent_of):
                        raise BadRequestError("A category cannot be nested under itself or its descendants")

            # Validation is done; apply everything at once
            row.parent_id = parent_id
            for name in ("name", "description", "slug"):
                if fields.get(name) is not None:
                    setattr(row, name, fields[name])
            row.updated_at = datetime.utcnow()
            return self._category_read(row)

    def delete_category(self, category_id: str) -> None:
        with self._lock:
            if category_id not in self.categories:
                raise NotFoundError("Category not found")

            responses_count = sum(1 for r in self.responses.values() if category_id in r.category_ids)
            if responses_count:
                raise ConflictError(responses_in_use_message(responses_count))

            children_count = sum(1 for c in self.categories.values() if c.parent_id == category_id)
            if children_count:
                raise ConflictError(children_message(children_count))

            del self.categories[category_id]
            logger.info(f"Deleted category {category_id}")

    # Responses

    def _check_categories(self, category_ids: List[str]) -> None:
        missing = [cid for cid in category_ids if cid not in self.categories]
        if missing:
            raise BadRequestError(f"Category not found: {', '.join(missing)}")

    def list_responses(self, query: ResponseQuery) -> ResponsePage:
        with self._lock:
            rows = list(self.responses.values())

            if query.category:
                category = self.find_category(query.category)
                if not category:
                    return ResponsePage(items=[], total=0)
                rows = [r for r in rows if category.id in r.category_ids]
            if query.tag:
                rows = [r for r in rows if query.tag in r.tags]

            # sorted() is stable, so ties keep insertion order
            if query.sort == SortOrder.oldest:
                rows = sorted(rows, key=lambda r: r.created_at)
            elif query.sort == SortOrder.az:
                rows = sorted(rows, key=lambda r: r.title)
            elif query.sort == SortOrder.za:
                rows = sorted(rows, key=lambda r: r.title, reverse=True)
            else:
                rows = sorted(rows, key=lambda r: r.created_at, reverse=True)

            page = rows[query.offset:query.offset + query.limit]
            return ResponsePage(items=[self._summary(r) for r in page], total=len(rows))

    def get_response(self, response_id: str) -> Optional[ResponseDetail]:
        with self._lock:
            row = self.responses.get(response_id)
            return self._detail(row) if row else None

    def create_response(self, data: ResponseCreate, author: str) -> ResponseDetail:
        with self._lock:
            self._check_categories(data.categories)
            row = ResponseRow(
                title=data.title,
                question=data.question,
                answer=data.answer,
                excerpt=data.excerpt,
                references=[ref.model_dump() for ref in data.references],
                category_ids=list(data.categories),
                tags=list(data.tags),
                author=author or "Anonymous",
            )
            self.responses[row.id] = row
            logger.info(f"Created response {row.id}")
            return self._detail(row)

    def update_response(self, response_id: str, data: ResponseUpdate) -> ResponseDetail:
        with self._lock:
            row = self.responses.get(response_id)
            if not row:
                raise NotFoundError("Response not found")

            fields = data.model_dump(exclude_unset=True, exclude_none=True)
            if "categories" in fields:
                self._check_categories(fields["categories"])

            for name in ("title", "question", "answer", "excerpt", "references", "tags"):
                if name in fields:
                    setattr(row, name, list(fields[name]) if isinstance(fields[name], list) else fields[name])
            if "categories" in fields:
                row.category_ids = list(fields["categories"])
            row.updated_at = datetime.utcnow()
            return self._detail(row)

    def delete_response(self, response_id: str) -> None:
        with self._lock:
            if self.responses.pop(response_id, None) is None:
                raise NotFoundError("Response not found")
            logger.info(f"Deleted response {response_id}")

    def search_responses(self, query: SearchQuery, limit: int) -> List[ResponseSummary]:
        if query.is_empty:
            return []
        with self._lock:
            ranked = rank(self.responses.values(), query, lambda r: (r.title, r.question, r.answer), limit)
            return [self._summary(r) for r in ranked]

    # Users

    def get_user(self, user_id: str) -> Optional[UserRead]:
        with self._lock:
            row = self.users.get(user_id)
            return self._user_read(row) if row else None

    def get_user_credentials(self, email: str) -> Optional[UserCredentials]:
        email = email.strip().lower()
        with self._lock:
            row = next((u for u in self.users.values() if u.email == email), None)
            if not row:
                return None
            return UserCredentials(**self._user_read(row).model_dump(), password_hash=row.password_hash)

    def create_user(self, name: str, email: str, password_hash: str, role: Role) -> UserRead:
        email = email.strip().lower()
        with self._lock:
            if any(u.email == email for u in self.users.values()):
                raise ConflictError("User with this email already exists")
            row = UserRow(name=name, email=email, password_hash=password_hash, role=role)
            self.users[row.id] = row
            return self._user_read(row)

    def update_user(self, user_id: str, **fields) -> UserRead:
        with self._lock:
            row = self.users.get(user_id)
            if not row:
                raise NotFoundError("User not found")
            for name, value in fields.items():
                setattr(row, name, value)
            row.updated_at = datetime.utcnow()
            return self._user_read(row)

    def record_login(self, user_id: str) -> UserRead:
        return self.update_user(user_id, last_login=datetime.utcnow())
