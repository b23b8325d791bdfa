"""
FastAPI dependencies: storage selection and the auth gate.
"""

import logging
from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from poprev.config import settings
from poprev.database import SessionLocal
from poprev.errors import AuthenticationError, PermissionDeniedError
from poprev.models.user import Role
from poprev.schemas.auth import UserRead
from poprev.services import auth_service
from poprev.store import ContentStore, InMemoryContentStore, SqlContentStore

logger = logging.getLogger(__name__)

_memory_store: Optional[InMemoryContentStore] = None


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_memory_store() -> InMemoryContentStore:
    """Process-wide in-memory store so state persists across requests."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryContentStore()
    return _memory_store


def get_store(db: Session = Depends(get_db)) -> ContentStore:
    if settings.storage_backend == "memory":
        return get_memory_store()
    return SqlContentStore(db)


def authenticate(
    request: Request,
    authorization: Optional[str] = Header(None),
    store: ContentStore = Depends(get_store),
) -> UserRead:
    """Resolve the bearer token to an active user and attach it to the request."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Authorization token required")

    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError("Authorization token required")

    try:
        user = auth_service.resolve_user(store, token)
    except AuthenticationError as e:
        logger.warning(f"Authentication failed: {e.message}")
        raise

    request.state.user = user
    return user


def require_roles(*roles: Role):
    """Build a dependency that lets through only users holding one of ``roles``."""
    allowed = set(roles)

    def authorize(request: Request, _: UserRead = Depends(authenticate)) -> UserRead:
        user = getattr(request.state, "user", None)
        if user is None:
            raise AuthenticationError("User not authenticated")
        if user.role not in allowed:
            raise PermissionDeniedError("Insufficient permissions")
        return user

    return authorize


require_editor = require_roles(Role.admin, Role.editor)
require_admin = require_roles(Role.admin)
