"""Test configuration and fixtures."""

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bug_tracker.api import app
from bug_tracker.bugs.services import BugService
from bug_tracker.db.base import Base, get_db
from bug_tracker.db.store import BugStore

# Create an in-memory SQLite database shared by every test
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override the get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency before any test client is created
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """Give every test a clean set of tables."""
    # Import models to register them with Base
    from bug_tracker.db import models  # noqa: F401

    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory() -> sessionmaker:
    return TestSessionLocal


@pytest.fixture
def engine():
    return test_engine


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session: Session) -> BugStore:
    return BugStore(db_session)


@pytest.fixture
def service(store: BugStore) -> BugService:
    return BugService(store)


def make_bug_payload(**overrides) -> dict:
    """Create a valid bug creation payload with optional overrides."""
    defaults = {
        "title": "Crash on save",
        "description": "App crashes when saving a document over 10MB",
        "priority": "critical",
        "assignee": "Alice",
        "reporter": "Bob",
        "environment": "Chrome 120",
    }
    defaults.update(overrides)
    return defaults


@pytest.fixture
def make_payload():
    """Factory fixture for creation payloads."""
    return make_bug_payload
