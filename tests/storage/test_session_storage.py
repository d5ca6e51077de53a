"""End-to-end tests for ``SQLSessionStorage`` on in-memory SQLite."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime, timedelta

import pytest
from structlog.testing import capture_logs

from authstore.backends.sqlite import SQLiteBridge, sqlite_session_queries
from authstore.core.errors import (
    ConversionError,
    QueryError,
    SchemaInitError,
    SessionExistsError,
    SessionNotFoundError,
)
from authstore.core.models import SessionModel
from authstore.storage import SQLSessionStorage, SQLUserStorage

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def users(user_storage: SQLUserStorage, make_user) -> list[int]:
    return [user_storage.insert(make_user()) for _ in range(2)]


def _session(key: str, user_id: int, expire: datetime = NOW, **data) -> SessionModel:
    return SessionModel(key=key, user_id=user_id, expire_date=expire, data=data)


class TestInitSchema:
    def test_idempotent(self, session_storage: SQLSessionStorage):
        session_storage.init_schema()

    def test_failure_is_schema_init_error(self, sqlite_conn):
        storage = SQLSessionStorage(
            sqlite_conn,
            sqlite_session_queries({"SESSIONS_TABLE_NAME": "bad name"}),
            SQLiteBridge(),
        )
        with pytest.raises(SchemaInitError) as exc_info:
            storage.init_schema()
        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)


class TestInsertAndFetch:
    def test_round_trip(self, session_storage: SQLSessionStorage, users):
        session = _session("abc", users[0], theme="dark", cart=[1, 2])
        session_storage.insert(session)
        assert session_storage.fetch_by_key("abc") == session

    def test_empty_data(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("empty", users[0]))
        assert session_storage.fetch_by_key("empty").data == {}

    def test_duplicate_key(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("abc", users[0]))
        with pytest.raises(SessionExistsError) as exc_info:
            session_storage.insert(_session("abc", users[1]))
        assert isinstance(exc_info.value.cause, sqlite3.IntegrityError)

    def test_unknown_user(self, session_storage: SQLSessionStorage):
        with pytest.raises(QueryError) as exc_info:
            session_storage.insert(_session("orphan", 9999))
        assert not isinstance(exc_info.value, SessionExistsError)

    def test_not_found(self, session_storage: SQLSessionStorage):
        with pytest.raises(SessionNotFoundError) as exc_info:
            session_storage.fetch_by_key("nope")
        assert exc_info.value.context.session_key == "nope"

    def test_corrupt_data(self, session_storage: SQLSessionStorage, users, sqlite_conn):
        sqlite_conn.execute(
            "INSERT INTO auth_session VALUES (?, ?, ?, ?)",
            ("bad", users[0], "2024-06-01T12:00:00.000000", "{not json"),
        )
        with pytest.raises(ConversionError):
            session_storage.fetch_by_key("bad")


class TestDelete:
    def test_delete_by_key(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("abc", users[0]))
        session_storage.delete_by_key("abc")
        with pytest.raises(SessionNotFoundError):
            session_storage.fetch_by_key("abc")

    def test_delete_missing_key(self, session_storage: SQLSessionStorage):
        session_storage.delete_by_key("never-existed")

    def test_delete_all_for_user(self, session_storage: SQLSessionStorage, users):
        for key in ("a", "b", "c"):
            session_storage.insert(_session(key, users[0]))
        session_storage.insert(_session("other", users[1]))

        assert session_storage.delete_all_for_user(users[0]) == 3
        assert session_storage.delete_all_for_user(users[0]) == 0
        assert session_storage.fetch_by_key("other").user_id == users[1]

    def test_cascade_on_user_delete(
        self, session_storage: SQLSessionStorage, user_storage: SQLUserStorage, users
    ):
        session_storage.insert(_session("abc", users[0]))
        user_storage.delete(users[0])
        with pytest.raises(SessionNotFoundError):
            session_storage.fetch_by_key("abc")


class TestCleanUpExpired:
    def test_boundary(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("past", users[0], NOW - timedelta(days=1)))
        session_storage.insert(_session("exact", users[0], NOW))
        session_storage.insert(_session("future", users[0], NOW + timedelta(microseconds=1)))

        assert session_storage.clean_up_expired(NOW) == 2

        assert session_storage.fetch_by_key("future").key == "future"
        for key in ("past", "exact"):
            with pytest.raises(SessionNotFoundError):
                session_storage.fetch_by_key(key)

    def test_idempotent(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("past", users[0], NOW - timedelta(hours=1)))
        assert session_storage.clean_up_expired(NOW) == 1
        assert session_storage.clean_up_expired(NOW) == 0

    def test_no_sessions(self, session_storage: SQLSessionStorage):
        assert session_storage.clean_up_expired(NOW) == 0

    def test_defaults_to_now(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("old", users[0], NOW))
        assert session_storage.clean_up_expired() == 1

    def test_logs_count(self, session_storage: SQLSessionStorage, users):
        session_storage.insert(_session("old", users[0], NOW))
        with capture_logs() as logs:
            session_storage.clean_up_expired(NOW)
        assert logs == [{"event": "sessions_cleaned_up", "count": 1, "log_level": "info"}]
