"""
Generic SQL user storage.

``SQLUserStorage`` composes a borrowed connection, a
:class:`~authstore.core.protocols.UserQueryProvider` (SQL text) and a
:class:`~authstore.core.protocols.Bridge` (time conversion, error
classification).  It never imports a driver; backends differ only in the two
collaborators they hand in.

Architecture::

    caller ──► SQLUserStorage ──► queries.insert()          (SQL text)
                    │          ──► bridge.convert_time()      (bind values)
                    │          ──► conn.execute(sql, params)
                    │
                    └── driver error ──► bridge.classify_insert_error()
                                           ├── DUPLICATE_INSERT → UserExistsError
                                           └── OTHER            → QueryError(cause=err)

Parameter order always follows ``queries.column_map``; the id, when bound,
comes last.

Examples:
    >>> storage = SQLUserStorage(conn, sqlite_user_queries(), SQLiteBridge())
    >>> storage.init_schema()
    >>> user_id = storage.insert(UserModel(username="alice", email="a@example.com"))
    >>> storage.update(user_id, UserModel(first_name="Alice"), fields=["first_name"])
    >>> storage.fetch_by_id(user_id).first_name
    'Alice'

Guardrails:
    ❌ DON'T: Log ``user.password``
    ❌ DON'T: Execute anything before partial-update field names are validated
    ✅ DO: Re-raise unique violations as domain errors, never raw driver errors

Tags:
    storage, users, crud, partial-update, authstore
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from authstore.core.errors import (
    AmbiguousCredentialsError,
    ErrorContext,
    InvalidFieldError,
    QueryError,
    SchemaInitError,
    UserExistsError,
    UserNotFoundError,
)
from authstore.core.logging import get_logger
from authstore.core.models import USER_TIME_FIELDS, ZERO_TIME, UserModel, utc_now
from authstore.core.protocols import Bridge, Connection, ErrorKind, UserQueryProvider
from authstore.core.repository import BaseRepository

logger = get_logger(__name__)

_BOOL_FIELDS = frozenset({"is_superuser", "is_staff", "is_active"})


class SQLUserStorage(BaseRepository):
    """User CRUD over any SQL backend.

    Parameters:
        conn: Borrowed connection; never closed here.
        queries: Query provider built for the connection's backend.
        bridge: Bridge matching the connection's driver.
        commit: See :class:`~authstore.core.repository.BaseRepository`.
    """

    def __init__(
        self,
        conn: Connection,
        queries: UserQueryProvider,
        bridge: Bridge,
        *,
        commit: bool = True,
    ) -> None:
        super().__init__(conn, commit=commit)
        self.queries = queries
        self.bridge = bridge

    # -- Schema ------------------------------------------------------------

    def init_schema(self) -> None:
        """Create the users table and its indexes if absent."""
        try:
            count = self.run_ddl(self.queries.init_statements())
        except Exception as err:
            logger.error("user_schema_init_failed", error=str(err))
            raise SchemaInitError(
                "failed to initialize user schema",
                context=ErrorContext(operation="init_schema"),
                cause=err,
            ) from err
        logger.info("schema_initialized", entity="user", statements=count)

    # -- Writes ------------------------------------------------------------

    def insert(self, user: UserModel) -> int:
        """Insert *user* and return its new id.

        ``date_joined`` is set to now and ``last_login`` to ``ZERO_TIME`` on
        the passed model before writing.  On success ``user.id`` holds the
        new id; on any failure it is reset to ``None``.

        Raises:
            UserExistsError: Username (or unique email) already taken.
            QueryError: Any other driver error.
        """
        user.date_joined = utc_now()
        user.last_login = ZERO_TIME
        params = self._row_params(user, self.queries.column_map)
        try:
            if self.queries.returns_id:
                row = self.write_returning(self.queries.insert(), params)
                new_id = int(row[0])
            else:
                cursor = self.write(self.queries.insert(), params)
                new_id = int(cursor.lastrowid)
        except Exception as err:
            user.id = None
            if self.bridge.classify_insert_error(err) is ErrorKind.DUPLICATE_INSERT:
                logger.info("duplicate_user_insert", username=user.username)
                raise UserExistsError(
                    "user with that username or email already exists",
                    context=ErrorContext(operation="insert", username=user.username),
                    cause=err,
                ) from err
            logger.error("user_insert_failed", username=user.username, error=str(err))
            raise QueryError(
                "failed to insert user",
                context=ErrorContext(operation="insert", username=user.username),
                cause=err,
            ) from err

        user.id = new_id
        logger.info("user_inserted", user_id=new_id, username=user.username)
        return new_id

    def update(
        self,
        user_id: int,
        user: UserModel,
        fields: Sequence[str] | None = None,
    ) -> None:
        """Write *user*'s values to the row with *user_id*.

        With no *fields* every mutable column is rewritten.  Otherwise only
        the named fields are, in the given order; duplicates are ignored.
        Updating an id that does not exist is not an error.

        Raises:
            InvalidFieldError: A field name is unknown (nothing is executed).
            AmbiguousCredentialsError: The new username/email belongs to
                another user.
            QueryError: Any other driver error.
        """
        column_map = self.queries.column_map
        if fields:
            names = list(dict.fromkeys(fields))
            for name in names:
                if name not in column_map:
                    raise InvalidFieldError(name).with_context(
                        operation="update", user_id=user_id
                    )
        else:
            names = []

        if names and self.queries.supports_partial_update:
            sql = self.queries.update_fields(names)
            params = [self._bind(name, getattr(user, name)) for name in names]
        else:
            sql = self.queries.update()
            params = self._row_params(user, column_map)
        params.append(user_id)

        try:
            self.write(sql, params)
        except Exception as err:
            context = ErrorContext(operation="update", user_id=user_id)
            if self.bridge.classify_update_error(err) is ErrorKind.DUPLICATE_UPDATE:
                logger.info("ambiguous_user_update", user_id=user_id, fields=names or None)
                raise AmbiguousCredentialsError(
                    "update would duplicate another user's username or email",
                    context=context,
                    cause=err,
                ) from err
            logger.error("user_update_failed", user_id=user_id, error=str(err))
            raise QueryError("failed to update user", context=context, cause=err) from err

        logger.debug("user_updated", user_id=user_id, fields=names or "all")

    def delete(self, user_id: int) -> None:
        """Delete the user with *user_id*; a missing id is not an error."""
        try:
            self.write(self.queries.delete(), (user_id,))
        except Exception as err:
            raise QueryError(
                "failed to delete user",
                context=ErrorContext(operation="delete", user_id=user_id),
                cause=err,
            ) from err
        logger.debug("user_deleted", user_id=user_id)

    # -- Reads -------------------------------------------------------------

    def fetch_by_id(self, user_id: int) -> UserModel:
        return self._fetch(self.queries.fetch_by_id(), user_id, ErrorContext(user_id=user_id))

    def fetch_by_username(self, username: str) -> UserModel:
        return self._fetch(
            self.queries.fetch_by_username(), username, ErrorContext(username=username)
        )

    def fetch_by_email(self, email: str) -> UserModel:
        return self._fetch(
            self.queries.fetch_by_email(), email, ErrorContext(metadata={"email": email})
        )

    # -- Internals ---------------------------------------------------------

    def _fetch(self, sql: str, key: Any, context: ErrorContext) -> UserModel:
        context.operation = "fetch"
        try:
            row = self.query_one(sql, (key,))
        except Exception as err:
            raise QueryError("failed to fetch user", context=context, cause=err) from err
        if row is None:
            raise UserNotFoundError("user not found", context=context)
        return self._to_model(row)

    def _bind(self, name: str, value: Any) -> Any:
        if name in USER_TIME_FIELDS:
            return self.bridge.convert_time(value)
        return value

    def _row_params(self, user: UserModel, column_map: Mapping[str, str]) -> list[Any]:
        return [self._bind(name, getattr(user, name)) for name in column_map]

    def _to_model(self, row: Sequence[Any]) -> UserModel:
        """Build a model from ``(id, *columns)`` in column-map order."""
        user = UserModel(id=int(row[0]))
        for name, value in zip(self.queries.column_map, row[1:], strict=True):
            if name in USER_TIME_FIELDS:
                value = self.bridge.convert_time_scan(value)
            elif name in _BOOL_FIELDS:
                value = bool(value)
            setattr(user, name, value)
        return user


__all__ = [
    "SQLUserStorage",
]
