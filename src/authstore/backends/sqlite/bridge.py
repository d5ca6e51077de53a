"""SQLite bridge for the stdlib ``sqlite3`` driver.

Unique violations surface as ``sqlite3.IntegrityError``.  Python 3.11+ sets
``sqlite_errorname`` on the exception; the message text is checked as well so
that foreign key and NOT NULL failures are never mistaken for duplicates.

Timestamps are stored as ``YYYY-MM-DDTHH:MM:SS.ffffff`` in UTC.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime

from authstore.core.errors import TimeConversionError
from authstore.core.protocols import ErrorKind

_UNIQUE_ERROR_NAMES = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})


def is_unique_violation(error: BaseException) -> bool:
    if not isinstance(error, sqlite3.IntegrityError):
        return False
    name = getattr(error, "sqlite_errorname", None)
    if name in _UNIQUE_ERROR_NAMES:
        return True
    return "UNIQUE constraint failed" in str(error)


class SQLiteBridge:
    """Bridge for sqlite3 connections."""

    @property
    def time_scan_type(self) -> type:
        return str

    def convert_time(self, value: datetime) -> str:
        # naive values are taken as UTC
        if value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value.isoformat(timespec="microseconds")

    def convert_time_scan(self, value: object) -> datetime:
        if not isinstance(value, str):
            raise TimeConversionError(value, str)
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as err:
            raise TimeConversionError(value, str, f"invalid timestamp {value!r}") from err
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)

    def classify_insert_error(self, error: BaseException) -> ErrorKind:
        return ErrorKind.DUPLICATE_INSERT if is_unique_violation(error) else ErrorKind.OTHER

    def classify_update_error(self, error: BaseException) -> ErrorKind:
        return ErrorKind.DUPLICATE_UPDATE if is_unique_violation(error) else ErrorKind.OTHER

    def is_duplicate_insert(self, error: BaseException) -> bool:
        return self.classify_insert_error(error) is ErrorKind.DUPLICATE_INSERT

    def is_duplicate_update(self, error: BaseException) -> bool:
        return self.classify_update_error(error) is ErrorKind.DUPLICATE_UPDATE


__all__ = [
    "SQLiteBridge",
    "is_unique_violation",
]
