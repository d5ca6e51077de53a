"""Tests for ``authstore.backends.registry``."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from authstore.backends.postgresql import PostgresBridge
from authstore.backends.registry import (
    Backend,
    BackendRegistry,
    create_session_storage,
    create_user_storage,
    get_backend,
)
from authstore.backends.sqlite import SQLiteBridge, sqlite_session_queries, sqlite_user_queries
from authstore.core.errors import ConfigError
from authstore.core.settings import StoreSettings
from authstore.storage import SQLSessionStorage, SQLUserStorage


class TestBackendRegistry:
    def test_defaults(self):
        assert BackendRegistry().list_backends() == ["postgres", "postgresql", "sqlite"]

    def test_alias(self):
        assert get_backend("postgres") is get_backend("postgresql")

    def test_unknown(self):
        with pytest.raises(ConfigError, match="Unknown database backend"):
            get_backend("mysql")

    def test_register(self):
        registry = BackendRegistry()
        custom = Backend(
            name="custom",
            user_queries=MagicMock(),
            session_queries=MagicMock(),
            bridge=SQLiteBridge,
        )
        registry.register("Custom", custom)
        assert registry.get("custom") is custom

    def test_registered_backend_builds_storage(self, monkeypatch: pytest.MonkeyPatch):
        registry = BackendRegistry()
        registry.register(
            "lite",
            Backend(
                name="lite",
                user_queries=sqlite_user_queries,
                session_queries=sqlite_session_queries,
                bridge=SQLiteBridge,
            ),
        )
        monkeypatch.setattr("authstore.backends.registry.backend_registry", registry)

        storage = create_user_storage(MagicMock(), "LITE", StoreSettings())
        assert isinstance(storage.bridge, SQLiteBridge)
        assert storage.queries.fetch_by_id().endswith("WHERE id=?;")
        assert "lite" in registry.list_backends()


class TestFactories:
    def test_postgres_user_storage(self):
        storage = create_user_storage(MagicMock(), "postgresql", StoreSettings())
        assert isinstance(storage, SQLUserStorage)
        assert isinstance(storage.bridge, PostgresBridge)
        assert storage.queries.returns_id is True
        assert "%s" in storage.queries.fetch_by_id()

    def test_sqlite_session_storage(self):
        storage = create_session_storage(MagicMock(), "sqlite", StoreSettings())
        assert isinstance(storage, SQLSessionStorage)
        assert isinstance(storage.bridge, SQLiteBridge)

    def test_settings_applied(self):
        settings = StoreSettings(
            users_table="accounts", email_unique=False, partial_updates=False, commit=False
        )
        storage = create_user_storage(MagicMock(), "sqlite", settings)
        assert "FROM accounts" in storage.queries.fetch_by_id()
        assert "UNIQUE," not in storage.queries.init_statements()[0].split("email", 1)[1]
        assert storage.queries.supports_partial_update is False
        assert storage.commit is False

    def test_replace_mapping_wins(self):
        settings = StoreSettings(users_table="accounts")
        storage = create_user_storage(
            MagicMock(), "sqlite", settings, replace_mapping={"USERS_TABLE_NAME": "members"}
        )
        assert "FROM members" in storage.queries.fetch_by_id()

    def test_default_settings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("AUTHSTORE_SESSIONS_TABLE", "web_sessions")
        storage = create_session_storage(MagicMock(), "sqlite")
        assert "web_sessions" in storage.queries.insert()
