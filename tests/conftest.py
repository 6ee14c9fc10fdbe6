"""
Shared fixtures.

Every test gets its own SQLite file under pytest's ``tmp_path`` so tests
never share state.
"""

import pytest
from fastapi.testclient import TestClient

from attachments_api.app.core.config import Settings
from attachments_api.app.core.store import BucketStore
from attachments_api.app.main import create_app
from attachments_api.app.services.namespace_service import ResourceNamespaceService


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "attachments.db")


@pytest.fixture
def store(db_path):
    """An open, empty bucket store."""
    bucket_store = BucketStore(db_path, timeout=5).open()
    yield bucket_store
    bucket_store.close()


@pytest.fixture
def books_store(store):
    """A store with the ``books`` and ``authors`` resource types provisioned."""
    ResourceNamespaceService(store).provision({"books", "authors"})
    return store


@pytest.fixture
def app_settings(db_path):
    return Settings(database_url=db_path, resource_types="books,authors", log_level="WARNING")


@pytest.fixture
def ratings_client(app_settings):
    with TestClient(create_app("ratings", app_settings)) as client:
        yield client


@pytest.fixture
def comments_client(app_settings):
    with TestClient(create_app("comments", app_settings)) as client:
        yield client
