"""
SQLAlchemy implementation of the content store.

One instance wraps the request's session. Every write runs inside
``_transaction`` so a failure part-way rolls the whole change back.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from poprev.errors import BadRequestError, ConflictError, NotFoundError
from poprev.models import Category, Response, ResponseTag, Role, User, response_categories
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

# Collations that compare titles by code point. SQLite's default BINARY
# already does.
TITLE_COLLATIONS = {
    "postgresql": "C",
    "mysql": "utf8mb4_bin",
}


def sort_columns(sort: SortOrder, dialect: str) -> tuple:
    """ORDER BY clause for a sort key; ties always fall back to insertion order."""
    title = Response.title
    if dialect in TITLE_COLLATIONS:
        title = title.collate(TITLE_COLLATIONS[dialect])

    primary = {
        SortOrder.newest: Response.created_at.desc(),
        SortOrder.oldest: Response.created_at.asc(),
        SortOrder.az: title.asc(),
        SortOrder.za: title.desc(),
    }[sort]
    return primary, Response.seq.asc()


def category_read(category: Category) -> CategoryRead:
    return CategoryRead(
        id=category.id,
        name=category.name,
        description=category.description,
        slug=category.slug,
        parent_category=category.parent_id,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def response_summary(response: Response) -> ResponseSummary:
    return ResponseSummary(
        id=response.id,
        title=response.title,
        question=response.question,
        excerpt=response.excerpt,
        categories=[CategoryRef(id=c.id, name=c.name, slug=c.slug) for c in response.categories],
        tags=response.tags,
        created_at=response.created_at,
    )


def response_detail(response: Response) -> ResponseDetail:
    summary = response_summary(response)
    return ResponseDetail(
        **{name: getattr(summary, name) for name in ResponseSummary.model_fields},
        answer=response.answer,
        references=[Reference(**ref) for ref in (response.references or [])],
        author=response.author,
        pdf_url=response.pdf_url,
        updated_at=response.updated_at,
    )


def user_read(user: User) -> UserRead:
    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        last_login=user.last_login,
        created_at=user.created_at,
    )


class SqlContentStore:
    """Content store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error, rolled back: {e.orig}")
            raise ConflictError("Write conflicts with existing data")
        except Exception:
            self.db.rollback()
            raise

    # Categories

    def _category_row(self, category_id: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def _parent_of(self, category_id: str) -> Optional[str]:
        return self.db.query(Category.parent_id).filter(Category.id == category_id).scalar()

    def list_categories(self, with_counts: bool = False) -> List[CategorySummary]:
        categories = self.db.query(Category).order_by(Category.name).all()

        counts = {}
        if with_counts:
            rows = (
                self.db.query(response_categories.c.category_id, func.count(response_categories.c.response_id))
                .group_by(response_categories.c.category_id)
                .all()
            )
            counts = dict(rows)

        return [
            CategorySummary(
                id=c.id,
                name=c.name,
                description=c.description,
                slug=c.slug,
                count=counts.get(c.id, 0) if with_counts else None,
            )
            for c in categories
        ]

    def get_category(self, category_id: str) -> Optional[CategoryRead]:
        category = self._category_row(category_id)
        return category_read(category) if category else None

    def find_category(self, id_or_slug: str) -> Optional[CategoryRead]:
        category = self._category_row(id_or_slug)
        if not category:
            category = self.db.query(Category).filter(Category.slug == id_or_slug.strip().lower()).first()
        return category_read(category) if category else None

    def create_category(self, data: CategoryCreate) -> CategoryRead:
        existing = self.db.query(Category).filter(
            or_(Category.name == data.name, Category.slug == data.slug)
        ).first()
        if existing:
            raise ConflictError("Category with this name or slug already exists")

        parent_id = data.parent_category or None
        if parent_id and not self._category_row(parent_id):
            raise NotFoundError("Parent category not found")

        category = Category(
            name=data.name,
            description=data.description,
            slug=data.slug,
            parent_id=parent_id,
        )
        with self._transaction():
            self.db.add(category)
        self.db.refresh(category)
        logger.info(f"Created category {category.id} ({category.slug})")
        return category_read(category)

    def update_category(self, category_id: str, data: CategoryUpdate) -> CategoryRead:
        category = self._category_row(category_id)
        if not category:
            raise NotFoundError("Category not found")

        fields = data.model_dump(exclude_unset=True)

        # Uniqueness is checked against every other category
        if data.slug and data.slug != category.slug:
            clash = self.db.query(Category).filter(Category.slug == data.slug, Category.id != category.id).first()
            if clash:
                raise ConflictError("Category with this slug already exists")
        if data.name and data.name != category.name:
            clash = self.db.query(Category).filter(Category.name == data.name, Category.id != category.id).first()
            if clash:
                raise ConflictError("Category with this name already exists")

        with self._transaction():
            if "parent_category" in fields:
                parent_id = fields["parent_category"] or None
                if parent_id:
                    if not self._category_row(parent_id):
                        raise NotFoundError("Parent category not found")
                    if creates_cycle(category.id, parent_id, self._parent_of):
                        raise BadRequestError("A category cannot be nested under itself or its descendants")
                category.parent_id = parent_id

            for name in ("name", "description", "slug"):
                if fields.get(name) is not None:
                    setattr(category, name, fields[name])

        self.db.refresh(category)
        return category_read(category)

    def _responses_using(self, category_id: str) -> int:
        return (
            self.db.query(func.count())
            .select_from(response_categories)
            .filter(response_categories.c.category_id == category_id)
            .scalar()
        )

    def _children_of(self, category_id: str) -> int:
        return self.db.query(Category).filter(Category.parent_id == category_id).count()

    def delete_category(self, category_id: str) -> None:
        with self._transaction():
            # Lock the row so nothing can attach to it until commit
            category = (
                self.db.query(Category)
                .filter(Category.id == category_id)
                .with_for_update()
                .first()
            )
            if not category:
                raise NotFoundError("Category not found")

            responses_count = self._responses_using(category_id)
            if responses_count:
                raise ConflictError(responses_in_use_message(responses_count))

            children_count = self._children_of(category_id)
            if children_count:
                raise ConflictError(children_message(children_count))

            self.db.delete(category)

        logger.info(f"Deleted category {category_id}")

    # Responses

    def _response_row(self, response_id: str) -> Optional[Response]:
        return self.db.query(Response).filter(Response.id == response_id).first()

    def _next_seq(self) -> int:
        return self.db.query(func.coalesce(func.max(Response.seq), 0)).scalar() + 1

    def _resolve_categories(self, category_ids: List[str]) -> List[Category]:
        """Load (and share-lock) the categories a response will point at."""
        if not category_ids:
            return []
        rows = (
            self.db.query(Category)
            .filter(Category.id.in_(category_ids))
            .with_for_update(read=True)
            .all()
        )
        found = {c.id for c in rows}
        missing = [cid for cid in category_ids if cid not in found]
        if missing:
            raise BadRequestError(f"Category not found: {', '.join(missing)}")
        return rows

    def list_responses(self, query: ResponseQuery) -> ResponsePage:
        q = self.db.query(Response)

        if query.category:
            category = self.find_category(query.category)
            if not category:
                return ResponsePage(items=[], total=0)
            q = q.filter(Response.categories.any(Category.id == category.id))
        if query.tag:
            q = q.filter(Response.tag_links.any(ResponseTag.name == query.tag))

        total = q.count()

        rows = (
            q.options(selectinload(Response.categories), selectinload(Response.tag_links))
            .order_by(*sort_columns(query.sort, self.db.get_bind().dialect.name))
            .offset(query.offset)
            .limit(query.limit)
            .all()
        )
        return ResponsePage(items=[response_summary(r) for r in rows], total=total)

    def get_response(self, response_id: str) -> Optional[ResponseDetail]:
        response = self._response_row(response_id)
        return response_detail(response) if response else None

    def create_response(self, data: ResponseCreate, author: str) -> ResponseDetail:
        with self._transaction():
            response = Response(
                title=data.title,
                question=data.question,
                answer=data.answer,
                excerpt=data.excerpt,
                references=[ref.model_dump() for ref in data.references],
                author=author or "Anonymous",
                seq=self._next_seq(),
            )
            response.categories = self._resolve_categories(data.categories)
            response.tag_links = [ResponseTag(name=tag, position=i) for i, tag in enumerate(data.tags)]
            self.db.add(response)

        self.db.refresh(response)
        logger.info(f"Created response {response.id}")
        return response_detail(response)

    def update_response(self, response_id: str, data: ResponseUpdate) -> ResponseDetail:
        with self._transaction():
            response = self._response_row(response_id)
            if not response:
                raise NotFoundError("Response not found")

            fields = data.model_dump(exclude_unset=True, exclude_none=True)
            for name in ("title", "question", "answer", "excerpt"):
                if name in fields:
                    setattr(response, name, fields[name])
            if "references" in fields:
                response.references = fields["references"]
            if "categories" in fields:
                response.categories = self._resolve_categories(fields["categories"])
            if "tags" in fields:
                response.tag_links = [ResponseTag(name=tag, position=i) for i, tag in enumerate(fields["tags"])]
            response.updated_at = datetime.utcnow()

        self.db.refresh(response)
        return response_detail(response)

    def delete_response(self, response_id: str) -> None:
        with self._transaction():
            response = self._response_row(response_id)
            if not response:
                raise NotFoundError("Response not found")
            self.db.delete(response)
        logger.info(f"Deleted response {response_id}")

    def search_responses(self, query: SearchQuery, limit: int) -> List[ResponseSummary]:
        if query.is_empty:
            return []

        candidates = self.db.query(Response).options(
            selectinload(Response.categories), selectinload(Response.tag_links)
        )
        # SQL lower() only folds ASCII on some backends, so non-ASCII needles
        # leave every row a candidate and ranking decides
        if all(needle.isascii() for needle in query.needles):
            conditions = []
            for needle in query.needles:
                for column in (Response.title, Response.question, Response.answer):
                    conditions.append(func.lower(column).contains(needle, autoescape=True))
            candidates = candidates.filter(or_(*conditions))

        rows = candidates.order_by(Response.seq.asc()).all()
        ranked = rank(rows, query, lambda r: (r.title, r.question, r.answer), limit)
        return [response_summary(r) for r in ranked]

    # Users

    def _user_row(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user(self, user_id: str) -> Optional[UserRead]:
        user = self._user_row(user_id)
        return user_read(user) if user else None

    def get_user_credentials(self, email: str) -> Optional[UserCredentials]:
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            return None
        return UserCredentials(**user_read(user).model_dump(), password_hash=user.password_hash)

    def create_user(self, name: str, email: str, password_hash: str, role: Role) -> UserRead:
        user = User(name=name, email=email.strip().lower(), password_hash=password_hash, role=role)
        with self._transaction():
            self.db.add(user)
        self.db.refresh(user)
        return user_read(user)

    def update_user(self, user_id: str, **fields) -> UserRead:
        with self._transaction():
            user = self._user_row(user_id)
            if not user:
                raise NotFoundError("User not found")
            for name, value in fields.items():
                setattr(user, name, value)
        self.db.refresh(user)
        return user_read(user)

    def record_login(self, user_id: str) -> UserRead:
        return self.update_user(user_id, last_login=datetime.utcnow())
