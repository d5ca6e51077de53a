"""Storage behaviour against a live PostgreSQL.

Runs only when ``AUTHSTORE_TEST_DATABASE_URL`` points at a scratch database;
tables are created with a per-run prefix and dropped afterwards.
"""

from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime, timedelta

import pytest

from authstore.backends.registry import create_session_storage, create_user_storage
from authstore.connection import create_connection
from authstore.core.errors import (
    AmbiguousCredentialsError,
    SessionNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from authstore.core.models import ZERO_TIME, SessionModel, UserModel
from authstore.core.settings import StoreSettings

DATABASE_URL = os.environ.get("AUTHSTORE_TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(
    not DATABASE_URL, reason="AUTHSTORE_TEST_DATABASE_URL not set"
)


@pytest.fixture
def pg():
    conn, info = create_connection(DATABASE_URL)
    suffix = uuid.uuid4().hex[:8]
    settings = StoreSettings(
        users_table=f"test_user_{suffix}", sessions_table=f"test_session_{suffix}"
    )
    users = create_user_storage(conn, info.backend, settings)
    sessions = create_session_storage(conn, info.backend, settings)
    users.init_schema()
    sessions.init_schema()
    yield users, sessions
    conn.execute(f"DROP TABLE IF EXISTS {settings.sessions_table}")
    conn.execute(f"DROP TABLE IF EXISTS {settings.users_table}")
    conn.close()


def _user(name: str) -> UserModel:
    return UserModel(username=name, password="hash", email=f"{name}@example.com")


class TestUsers:
    def test_insert_fetch(self, pg):
        users, _ = pg
        user = _user("alice")
        user_id = users.insert(user)
        fetched = users.fetch_by_id(user_id)
        assert fetched == user
        assert fetched.last_login == ZERO_TIME

    def test_duplicate(self, pg):
        users, _ = pg
        users.insert(_user("alice"))
        dup = _user("alice")
        with pytest.raises(UserExistsError):
            users.insert(dup)
        assert dup.id is None

    def test_partial_update(self, pg):
        users, _ = pg
        user_id = users.insert(_user("alice"))
        before = users.fetch_by_id(user_id)
        users.update(user_id, UserModel(first_name="Al"), ["first_name"])
        before.first_name = "Al"
        assert users.fetch_by_id(user_id) == before

    def test_ambiguous(self, pg):
        users, _ = pg
        users.insert(_user("alice"))
        bob = users.insert(_user("bob"))
        with pytest.raises(AmbiguousCredentialsError):
            users.update(bob, UserModel(username="alice"), ["username"])

    def test_delete_idempotent(self, pg):
        users, _ = pg
        users.delete(987654)
        with pytest.raises(UserNotFoundError):
            users.fetch_by_id(987654)


class TestSessions:
    def test_clean_up(self, pg):
        users, sessions = pg
        user_id = users.insert(_user("alice"))
        now = datetime.now(UTC).replace(microsecond=0)
        sessions.insert(SessionModel("old", user_id, now, {"a": 1}))
        sessions.insert(SessionModel("new", user_id, now + timedelta(seconds=1), {}))

        assert sessions.clean_up_expired(now) == 1
        assert sessions.clean_up_expired(now) == 0
        assert sessions.fetch_by_key("new").user_id == user_id
        with pytest.raises(SessionNotFoundError):
            sessions.fetch_by_key("old")
