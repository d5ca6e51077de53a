"""Generic SQL session storage.

Same composition as :mod:`authstore.storage.users`: a borrowed connection, a
:class:`~authstore.core.protocols.SessionQueryProvider` and a
:class:`~authstore.core.protocols.Bridge`.  Session data is stored as JSON
text.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from authstore.core.errors import (
    ConversionError,
    ErrorContext,
    QueryError,
    SchemaInitError,
    SessionExistsError,
    SessionNotFoundError,
)
from authstore.core.logging import get_logger
from authstore.core.models import SessionModel, utc_now
from authstore.core.protocols import Bridge, Connection, ErrorKind, SessionQueryProvider
from authstore.core.repository import BaseRepository

logger = get_logger(__name__)


class SQLSessionStorage(BaseRepository):
    """Session lifecycle over any SQL backend.

    Every operation is one parameterized statement.  The users table must
    exist before :meth:`init_schema` runs, since sessions reference it.
    """

    def __init__(
        self,
        conn: Connection,
        queries: SessionQueryProvider,
        bridge: Bridge,
        *,
        commit: bool = True,
    ) -> None:
        super().__init__(conn, commit=commit)
        self.queries = queries
        self.bridge = bridge

    def init_schema(self) -> None:
        try:
            count = self.run_ddl(self.queries.init_statements())
        except Exception as err:
            logger.error("session_schema_init_failed", error=str(err))
            raise SchemaInitError(
                "failed to initialize session schema",
                context=ErrorContext(operation="init_schema"),
                cause=err,
            ) from err
        logger.info("schema_initialized", entity="session", statements=count)

    def insert(self, session: SessionModel) -> None:
        """Store *session*.

        Raises:
            SessionExistsError: The key is already in use.
            QueryError: Any other driver error (e.g. unknown ``user_id``).
        """
        params = (
            session.key,
            session.user_id,
            self.bridge.convert_time(session.expire_date),
            json.dumps(session.data),
        )
        context = ErrorContext(operation="insert", user_id=session.user_id)
        try:
            self.write(self.queries.insert(), params)
        except Exception as err:
            if self.bridge.classify_insert_error(err) is ErrorKind.DUPLICATE_INSERT:
                logger.info("duplicate_session_insert", user_id=session.user_id)
                raise SessionExistsError(
                    "session key already exists", context=context, cause=err
                ) from err
            logger.error("session_insert_failed", user_id=session.user_id, error=str(err))
            raise QueryError("failed to insert session", context=context, cause=err) from err
        logger.debug("session_inserted", user_id=session.user_id)

    def fetch_by_key(self, key: str) -> SessionModel:
        context = ErrorContext(operation="fetch", session_key=key)
        try:
            row = self.query_one(self.queries.fetch_by_key(), (key,))
        except Exception as err:
            raise QueryError("failed to fetch session", context=context, cause=err) from err
        if row is None:
            raise SessionNotFoundError("session not found", context=context)
        return self._to_model(row)

    def delete_by_key(self, key: str) -> None:
        """Delete one session; a missing key is not an error."""
        self._delete(self.queries.delete_by_key(), key, ErrorContext(operation="delete"))

    def delete_all_for_user(self, user_id: int) -> int:
        """Delete every session of *user_id*; returns how many were removed."""
        count = self._delete(
            self.queries.delete_for_user(),
            user_id,
            ErrorContext(operation="delete_for_user", user_id=user_id),
        )
        logger.info("user_sessions_deleted", user_id=user_id, count=count)
        return count

    def clean_up_expired(self, now: datetime | None = None) -> int:
        """Delete sessions with ``expire_date <= now``; returns the count."""
        now = now or utc_now()
        count = self._delete(
            self.queries.clean_up(),
            self.bridge.convert_time(now),
            ErrorContext(operation="clean_up"),
        )
        logger.info("sessions_cleaned_up", count=count)
        return count

    def _delete(self, sql: str, param: Any, context: ErrorContext) -> int:
        try:
            cursor = self.write(sql, (param,))
        except Exception as err:
            raise QueryError("failed to delete sessions", context=context, cause=err) from err
        return max(cursor.rowcount, 0)

    def _to_model(self, row: Sequence[Any]) -> SessionModel:
        key, user_id, expire_date, raw_data = row
        try:
            data = json.loads(raw_data) if raw_data else {}
        except (TypeError, ValueError) as err:
            raise ConversionError(
                "session data is not valid JSON",
                context=ErrorContext(session_key=key),
                cause=err,
            ) from err
        return SessionModel(
            key=key,
            user_id=int(user_id),
            expire_date=self.bridge.convert_time_scan(expire_date),
            data=data,
        )


__all__ = [
    "SQLSessionStorage",
]
