"""
Shared pytest fixtures for authstore tests.

This module provides:
- In-memory SQLite connections (foreign keys on) and ready storages
- A user factory producing distinct usernames/emails
- Settings isolation (AUTHSTORE_* env vars, cached settings)

Storage behaviour is tested end-to-end on SQLite; PostgreSQL specifics use
mocks and the real psycopg error classes.  Tests under ``integration/`` need
``AUTHSTORE_TEST_DATABASE_URL``.
"""

from __future__ import annotations

import itertools
import os
import sqlite3
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from authstore.backends.sqlite import SQLiteBridge, sqlite_session_queries, sqlite_user_queries
from authstore.core.models import UserModel
from authstore.core.settings import reset_settings
from authstore.storage import SQLSessionStorage, SQLUserStorage


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop AUTHSTORE_* env vars and the cached settings around each test."""
    for key in list(os.environ):
        if key.startswith("AUTHSTORE_") and key != "AUTHSTORE_TEST_DATABASE_URL":
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# SQLite Fixtures
# =============================================================================


@pytest.fixture
def sqlite_conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite connection with foreign keys enforced."""
    conn = sqlite3.connect(":memory:")
    conn.execute("PRAGMA foreign_keys = ON")
    yield conn
    conn.close()


@pytest.fixture
def user_storage(sqlite_conn: sqlite3.Connection) -> SQLUserStorage:
    storage = SQLUserStorage(sqlite_conn, sqlite_user_queries(), SQLiteBridge())
    storage.init_schema()
    return storage


@pytest.fixture
def session_storage(
    sqlite_conn: sqlite3.Connection, user_storage: SQLUserStorage
) -> SQLSessionStorage:
    storage = SQLSessionStorage(sqlite_conn, sqlite_session_queries(), SQLiteBridge())
    storage.init_schema()
    return storage


@pytest.fixture
def make_user() -> Callable[..., UserModel]:
    """Factory for users with unique username and email."""
    counter = itertools.count(1)

    def _make(**overrides) -> UserModel:
        n = next(counter)
        values = {
            "username": f"user{n}",
            "password": f"pbkdf2_sha256$hash{n}",
            "email": f"user{n}@example.com",
            "first_name": "First",
            "last_name": "Last",
        }
        values.update(overrides)
        return UserModel(**values)

    return _make
