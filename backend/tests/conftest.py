"""
Pytest configuration and shared fixtures for backend tests.

WHAT: Centralized test configuration with markers
WHY: Enable test organization, filtering, and shared test utilities
HOW: Point settings at a throwaway directory, then define fixtures
"""

import os
import tempfile

# Must run before pricematch.core.config is imported
_TEST_ROOT = tempfile.mkdtemp(prefix="pricematch-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_ROOT}/test.db")
os.environ.setdefault("LOG_FILE", f"{_TEST_ROOT}/logs/app.log")
os.environ.setdefault("STORAGE_DIR", f"{_TEST_ROOT}/uploads")
os.environ.setdefault("STORAGE_PUBLIC_BASE_URL", "http://testserver/files")

import pytest
from fastapi.testclient import TestClient

from pricematch.capabilities import Platform, SqlDatastore, LocalBlobStore, reset_platform
from pricematch.core.database import Base, engine
from pricematch.core import models  # noqa: F401  (registers tables)
from pricematch.models.domain import UserIdentity


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (isolated component tests)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (multiple components)"
    )


@pytest.fixture(autouse=True)
def reset_platform_singleton():
    """
    Reset platform singleton before each test.

    WHAT: Clear cached platform between tests
    WHY: Prevent test pollution and ensure clean state
    HOW: Call reset_platform() before and after each test
    """
    reset_platform()
    yield
    reset_platform()


@pytest.fixture
def db_tables():
    """
    Create a fresh schema for each test.

    WHAT: Setup and teardown test database
    WHY: Ensure test isolation
    HOW: Create all tables before and drop them after each test
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def datastore(db_tables):
    return SqlDatastore()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"), "http://testserver/files")


@pytest.fixture
def platform(datastore, blob_store):
    return Platform(datastore=datastore, blobs=blob_store)


@pytest.fixture
def client(platform):
    """FastAPI test client wired to the per-test platform."""
    from pricematch.main import app
    from pricematch.api.deps import platform_dependency

    app.dependency_overrides[platform_dependency] = lambda: platform
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice():
    return UserIdentity(id="user_alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob():
    return UserIdentity(id="user_bob", email="bob@example.com", display_name="Bob")


@pytest.fixture
def carol():
    return UserIdentity(id="user_carol", email="carol@example.com", display_name="Carol")


@pytest.fixture
def admin():
    return UserIdentity(id="user_admin", email="admin@example.com", display_name="Admin", role="admin")

