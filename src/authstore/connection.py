"""Open a driver connection from a database URL.

==============================================  =====================
URL                                             Opens
==============================================  =====================
``None``, ``""``, ``memory``, ``:memory:``      sqlite3, in memory
``sqlite:///path/auth.db`` or a bare path       sqlite3, file
``postgresql://user:pw@host:5432/db``           psycopg, autocommit
``postgres://...``, ``postgresql+psycopg://``   psycopg, autocommit
==============================================  =====================

::

    conn, info = create_connection(StoreSettings().database_url)
    users = create_user_storage(conn, info.backend)

SQLite connections have ``PRAGMA foreign_keys = ON`` so session rows are
removed with their user.  The caller owns the connection and closes it.
"""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import psycopg

from authstore.core.errors import DatabaseConnectionError, ErrorContext
from authstore.core.logging import get_logger

logger = get_logger(__name__)

_PASSWORD_RE = re.compile(r"(://[^:/@]+:)[^@]*@")
_MEMORY_NAMES = ("", "memory", ":memory:")


def redact_url(url: str) -> str:
    """*url* with the password replaced by ``***``."""
    return _PASSWORD_RE.sub(r"\1***@", url)


@dataclass(frozen=True)
class ConnectionInfo:
    """What :func:`create_connection` opened."""

    backend: str  # registry name: "sqlite" or "postgresql"
    persistent: bool
    url: str  # password redacted
    resolved_path: str | None = field(default=None, repr=False)

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    @property
    def is_postgres(self) -> bool:
        return self.backend == "postgresql"


def parse_url(db: str | None) -> tuple[str, str]:
    """Split *db* into ``(scheme, target)``.

    *scheme* is ``"memory"``, ``"sqlite"``, ``"postgresql"`` or ``"file"``;
    *target* is the path or the driver-ready URL.
    """
    if db is None or db in _MEMORY_NAMES:
        return "memory", ":memory:"

    scheme, sep, rest = db.partition("://")
    if not sep:
        return "file", db
    if scheme == "sqlite":
        path = rest.removeprefix("/")
        return ("memory", ":memory:") if path in _MEMORY_NAMES else ("sqlite", path)
    base = scheme.split("+", 1)[0]
    if base in ("postgresql", "postgres"):
        # drop a driver suffix such as +psycopg
        return "postgresql", f"{base}://{rest}"
    return "file", db


def backend_for_url(db: str | None) -> str:
    """Registry name of the backend *db* opens."""
    return "postgresql" if parse_url(db)[0] == "postgresql" else "sqlite"


def _connect_sqlite(target: str) -> sqlite3.Connection:
    conn = sqlite3.connect(target)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _connect_postgres(url: str) -> psycopg.Connection:
    try:
        return psycopg.connect(url, autocommit=True)
    except psycopg.Error as e:
        logger.error("database_connect_failed", backend="postgresql", error=type(e).__name__)
        raise DatabaseConnectionError(
            "cannot connect to PostgreSQL",
            context=ErrorContext(operation="connect"),
            cause=e,
        ) from e


def create_connection(db: str | None = None) -> tuple[Any, ConnectionInfo]:
    """Open a connection for *db* and describe it.

    Raises:
        DatabaseConnectionError: PostgreSQL refused the connection.
    """
    scheme, target = parse_url(db)
    if scheme == "postgresql":
        conn = _connect_postgres(target)
        info = ConnectionInfo("postgresql", persistent=True, url=redact_url(target))
    elif scheme == "memory":
        conn = _connect_sqlite(":memory:")
        info = ConnectionInfo("sqlite", persistent=False, url=":memory:")
    else:
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        resolved = str(path.resolve())
        conn = _connect_sqlite(resolved)
        info = ConnectionInfo("sqlite", persistent=True, url=target, resolved_path=resolved)

    logger.debug("database_connected", backend=info.backend, persistent=info.persistent)
    return conn, info


__all__ = [
    "ConnectionInfo",
    "backend_for_url",
    "create_connection",
    "parse_url",
    "redact_url",
]
