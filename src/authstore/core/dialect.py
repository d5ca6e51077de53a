"""SQL dialect abstraction for backend-agnostic query generation.

Provides a ``Dialect`` protocol and the two concrete implementations used by
the shipped backends.  Query providers use ``Dialect`` methods to generate
positional placeholders without referencing a specific driver.

Architecture::

    Query provider:
    ┌────────────────────────────────────────────────────────────────┐
    │  sets = [f"{col}={d.placeholder(i)}" for i, col in ...]        │
    │  sql = f"UPDATE t SET {sets} WHERE id={d.placeholder(n)}"      │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
              ┌──────────────┐        ┌──────────────┐
              │ PostgreSQL   │        │ SQLite       │
              │ %s, %s, %s   │        │ ?, ?, ?      │
              └──────────────┘        └──────────────┘

Placeholder indexes are 0-based.  ``placeholder(i)`` binds the ``i + 1``-th
positional parameter; anonymous styles ignore the index, so the order of the
parameter tuple alone decides the binding.

Examples:
    >>> from authstore.core.dialect import get_dialect
    >>> d = get_dialect("postgresql")
    >>> d.placeholders(3)
    '%s, %s, %s'

Tags:
    dialect, sql, placeholders, postgresql, sqlite
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """Placeholder style of one backend."""

    name: str

    def placeholder(self, index: int) -> str:
        """Marker binding parameter ``index`` (0-based).

        Numbered styles would need the index; ``?`` and ``%s`` ignore it.
        """
        ...

    def placeholders(self, count: int) -> str:
        """``count`` markers joined by ``", "``, e.g. for a VALUES list."""
        ...


class _PositionalDialect:
    """Dialect whose marker is the same for every parameter."""

    name = ""
    marker = ""

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return self.marker

    def placeholders(self, count: int) -> str:
        return ", ".join([self.marker] * count)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SQLiteDialect(_PositionalDialect):
    """stdlib sqlite3 (qmark style)."""

    name = "sqlite"
    marker = "?"


class PostgreSQLDialect(_PositionalDialect):
    """psycopg 3 (format style).

    psycopg rewrites each ``%s`` to a server-side ``$n`` in order of
    appearance.
    """

    name = "postgresql"
    marker = "%s"


_DIALECTS: dict[str, type[_PositionalDialect]] = {
    "sqlite": SQLiteDialect,
    "postgresql": PostgreSQLDialect,
    "postgres": PostgreSQLDialect,
}


def get_dialect(db_type: str) -> Dialect:
    """Dialect for a backend name (``sqlite``, ``postgresql`` / ``postgres``).

    Raises:
        ValueError: Unknown backend name.
    """
    try:
        return _DIALECTS[db_type.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown dialect {db_type!r}; expected one of {', '.join(sorted(_DIALECTS))}"
        ) from None


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
]
