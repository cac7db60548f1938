"""
Pytest configuration and shared fixtures for linkforge tests.
"""

import os

os.environ.setdefault("SHORTEN_DELAY_SECONDS", "0")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from linkforge.main import app
from linkforge.schemas import LinkRecord
from linkforge.storage import LinkStore, MemoryBlobStore, get_store


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def store(blob_store):
    return LinkStore(blob_store)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_link():
    """Build a LinkRecord with sensible defaults."""
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        kwargs.setdefault("original_url", f"https://example.com/{counter['n']}")
        kwargs.setdefault("short_code", f"code{counter['n']:03d}")
        return LinkRecord(**kwargs)

    return _make
