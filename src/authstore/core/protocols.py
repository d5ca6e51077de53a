"""
Canonical protocol definitions for authstore.

The generic storages depend only on these shapes.  A backend plugs in by
supplying objects that satisfy :class:`UserQueryProvider`,
:class:`SessionQueryProvider` and :class:`Bridge`; the caller supplies a
:class:`Connection`.

Architecture:
    ::

        protocols.py
        ├── Connection            — sync DB-API-ish connection (sqlite3, psycopg)
        ├── ErrorKind             — closed classification of driver errors
        ├── Bridge                — error classification + time conversion
        ├── UserQueryProvider     — SQL text for user operations
        └── SessionQueryProvider  — SQL text for session operations

    Consumers:
        storage/users.py, storage/sessions.py, backends/*

Guardrails:
    ❌ DON'T: Import psycopg or sqlite3 in the storages
    ✅ DO: Put every driver-specific detail behind Bridge / query providers

Tags:
    protocol, connection, bridge, query-provider, authstore
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    Minimal synchronous connection interface.

    Both ``sqlite3.Connection`` and ``psycopg.Connection`` satisfy it:
    ``execute`` returns a cursor exposing ``fetchone()``, ``rowcount`` and
    (for SQLite) ``lastrowid``.

    Examples:
        >>> cur = conn.execute("SELECT id FROM auth_user WHERE username = %s", ("bob",))
        >>> row = cur.fetchone()
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute SQL statement with optional parameters."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


class ErrorKind(str, Enum):
    """Classification of a raw driver error, produced per call by a Bridge."""

    DUPLICATE_INSERT = "duplicate_insert"
    DUPLICATE_UPDATE = "duplicate_update"
    OTHER = "other"


@runtime_checkable
class Bridge(Protocol):
    """
    Backend-specific translator between driver and model.

    All knowledge of driver error codes and native temporal representations
    lives behind this interface.
    """

    @property
    def time_scan_type(self) -> type:
        """Python type the driver returns for temporal columns."""
        ...

    def convert_time(self, value: datetime) -> Any:
        """Model datetime -> value to bind as a statement parameter."""
        ...

    def convert_time_scan(self, value: Any) -> datetime:
        """Scanned temporal value -> aware UTC datetime.

        Raises:
            TimeConversionError: If *value* is not a ``time_scan_type``.
        """
        ...

    def classify_insert_error(self, error: BaseException) -> ErrorKind:
        ...

    def classify_update_error(self, error: BaseException) -> ErrorKind:
        ...


@runtime_checkable
class UserQueryProvider(Protocol):
    """Ready-to-bind SQL text for every user operation."""

    @property
    def column_map(self) -> Mapping[str, str]:
        """Mutable field name -> column name, in parameter order."""
        ...

    @property
    def returns_id(self) -> bool:
        """True if ``insert()`` yields the new id as a result row."""
        ...

    @property
    def supports_partial_update(self) -> bool:
        ...

    def init_statements(self) -> Sequence[str]:
        ...

    def fetch_by_id(self) -> str:
        ...

    def fetch_by_username(self) -> str:
        ...

    def fetch_by_email(self) -> str:
        ...

    def insert(self) -> str:
        ...

    def update(self) -> str:
        ...

    def update_fields(self, fields: Sequence[str]) -> str:
        ...

    def delete(self) -> str:
        ...


@runtime_checkable
class SessionQueryProvider(Protocol):
    """Ready-to-bind SQL text for every session operation."""

    def init_statements(self) -> Sequence[str]:
        ...

    def insert(self) -> str:
        ...

    def fetch_by_key(self) -> str:
        ...

    def delete_by_key(self) -> str:
        ...

    def delete_for_user(self) -> str:
        ...

    def clean_up(self) -> str:
        ...


__all__ = [
    "Connection",
    "ErrorKind",
    "Bridge",
    "UserQueryProvider",
    "SessionQueryProvider",
]
