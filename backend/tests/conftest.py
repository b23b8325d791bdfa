"""Shared test fixtures."""

import os

# Point the app at a throwaway database before anything imports settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

import poprev.models  # noqa: F401
from poprev.database import Base
from poprev.dependencies import get_db, get_store
from poprev.main import app
from poprev.models import Response, Role
from poprev.schemas.category import CategoryCreate
from poprev.schemas.response import Reference, ResponseCreate
from poprev.services.auth_service import create_access_token, hash_password
from poprev.store import InMemoryContentStore, SqlContentStore


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sql_store(db_session):
    """Store over the same session the client uses."""
    return SqlContentStore(db_session)


@pytest.fixture(params=["sql", "memory"])
def store(request, db_session):
    """Run store tests against both implementations."""
    if request.param == "sql":
        return SqlContentStore(db_session)
    return InMemoryContentStore()


@pytest.fixture
def memory_client():
    """Test client whose requests all hit one fresh in-memory store."""
    memory_store = InMemoryContentStore()
    app.dependency_overrides[get_store] = lambda: memory_store
    with TestClient(app) as test_client:
        test_client.store = memory_store
        yield test_client
    app.dependency_overrides.clear()


def set_created_at(store, response_id: str, when: datetime) -> None:
    """Pin a response's creation time so date ordering is deterministic."""
    if isinstance(store, InMemoryContentStore):
        store.responses[response_id].created_at = when
    else:
        store.db.query(Response).filter(Response.id == response_id).update({"created_at": when})
        store.db.commit()


def make_response(store, title="Sample", categories=None, tags=None, **overrides):
    data = dict(
        title=title,
        question=f"Question about {title}?",
        answer=f"<p>Answer about {title}.</p>",
        excerpt=f"Excerpt about {title}",
        categories=categories or [],
        tags=tags or [],
    )
    data.update(overrides)
    return store.create_response(ResponseCreate(**data), author="Test Author")


def make_category(store, name="Deity", slug=None, description=None, parent=None):
    return store.create_category(CategoryCreate(
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        description=description or f"All about {name}",
        parent_category=parent,
    ))


def _make_user(store, name, email, role, is_active=True):
    user = store.create_user(
        name=name,
        email=email,
        password_hash=hash_password("password123"),
        role=role,
    )
    if not is_active:
        user = store.update_user(user.id, is_active=False)
    return user


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def admin_user(sql_store):
    return _make_user(sql_store, "Ada Admin", "admin@example.com", Role.admin)


@pytest.fixture
def editor_user(sql_store):
    return _make_user(sql_store, "Eddie Editor", "editor@example.com", Role.editor)


@pytest.fixture
def viewer_user(sql_store):
    return _make_user(sql_store, "Vic Viewer", "viewer@example.com", Role.viewer)


@pytest.fixture
def inactive_user(sql_store):
    return _make_user(sql_store, "Ina Inactive", "inactive@example.com", Role.admin, is_active=False)


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def editor_headers(editor_user):
    return bearer(editor_user)


@pytest.fixture
def viewer_headers(viewer_user):
    return bearer(viewer_user)


@pytest.fixture
def sample_category(sql_store):
    """Create a sample category."""
    return make_category(sql_store, "Deity")


@pytest.fixture
def sample_response(sql_store, sample_category):
    """Create a sample response filed under the sample category."""
    return make_response(
        sql_store,
        title="Why is God described as a Trinity?",
        categories=[sample_category.id],
        tags=["God", "Trinity"],
        references=[Reference(paper=10, section=0, paragraph=1, quote="The Paradise Trinity")],
    )
