"""Base repository with borrowed-connection statement helpers.

Provides :class:`BaseRepository`, the shared plumbing of the user and session
storages.  It holds a borrowed :class:`~authstore.core.protocols.Connection`
and owns the commit/rollback policy around single statements.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   conn: Connection        ← borrowed, never closed here            │
    │   commit: bool            ← commit after writes, rollback on error │
    │                                                                    │
    │   execute(sql, params)    → cursor                                 │
    │   query_one(sql, params)  → row tuple | None                       │
    │   write(sql, params)      → cursor (committed when commit=True)    │
    │   run_ddl(statements)     → executes in order                      │
    └────────────────────────────────────────────────────────────────────┘

The helpers let driver exceptions propagate untouched; subclasses classify
them through their Bridge.

Tags:
    repository, database, connection, authstore
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from authstore.core.protocols import Connection


class BaseRepository:
    """Statement helpers shared by the SQL storages.

    Parameters:
        conn: Any object satisfying the :class:`Connection` protocol.
        commit: Commit after each successful write and roll back after a
                failed statement.  Pass ``False`` when the caller manages
                transactions itself.
    """

    def __init__(self, conn: Connection, *, commit: bool = True) -> None:
        self.conn = conn
        self.commit = commit

    # -- Query helpers -----------------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute a statement and return the raw cursor."""
        try:
            return self.conn.execute(sql, tuple(params))
        except Exception:
            self._rollback()
            raise

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Sequence[Any] | None:
        """Execute a SELECT and return the first row (or None)."""
        cursor = self.execute(sql, params)
        try:
            return cursor.fetchone()
        except Exception:
            self._rollback()
            raise

    def write(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute a data-modifying statement and commit it."""
        cursor = self.execute(sql, params)
        self._commit()
        return cursor

    def write_returning(self, sql: str, params: Sequence[Any] = ()) -> Sequence[Any] | None:
        """Execute ``INSERT ... RETURNING`` and return the first row."""
        row = self.query_one(sql, params)
        self._commit()
        return row

    def run_ddl(self, statements: Iterable[str]) -> int:
        """Execute DDL statements in order; returns how many ran."""
        count = 0
        for stmt in statements:
            try:
                self.conn.execute(stmt)
            except Exception:
                self._rollback()
                raise
            count += 1
        self._commit()
        return count

    # -- Transaction policy ------------------------------------------------

    def _commit(self) -> None:
        if self.commit:
            self.conn.commit()

    def _rollback(self) -> None:
        if self.commit:
            self.conn.rollback()


__all__ = [
    "BaseRepository",
]
