"""PostgreSQL bridge for psycopg 3.

psycopg reports the SQLSTATE of a server error on ``Error.sqlstate``; a
unique constraint violation is ``23505`` (``psycopg.errors.UniqueViolation``).
``TIMESTAMP`` columns (without time zone) are bound and scanned as naive
``datetime`` objects that hold UTC wall-clock time.
"""

from __future__ import annotations

from datetime import UTC, datetime

import psycopg

from authstore.core.errors import TimeConversionError
from authstore.core.protocols import ErrorKind

POSTGRES_KEY_EXISTS = "23505"


def is_unique_violation(error: BaseException) -> bool:
    """True if *error* is a psycopg error carrying SQLSTATE 23505."""
    return isinstance(error, psycopg.Error) and error.sqlstate == POSTGRES_KEY_EXISTS


class PostgresBridge:
    """Bridge for psycopg connections against PostgreSQL."""

    @property
    def time_scan_type(self) -> type:
        return datetime

    def convert_time(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    def convert_time_scan(self, value: object) -> datetime:
        if not isinstance(value, datetime):
            raise TimeConversionError(value, datetime)
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def classify_insert_error(self, error: BaseException) -> ErrorKind:
        return ErrorKind.DUPLICATE_INSERT if is_unique_violation(error) else ErrorKind.OTHER

    def classify_update_error(self, error: BaseException) -> ErrorKind:
        return ErrorKind.DUPLICATE_UPDATE if is_unique_violation(error) else ErrorKind.OTHER

    def is_duplicate_insert(self, error: BaseException) -> bool:
        return self.classify_insert_error(error) is ErrorKind.DUPLICATE_INSERT

    def is_duplicate_update(self, error: BaseException) -> bool:
        return self.classify_update_error(error) is ErrorKind.DUPLICATE_UPDATE


__all__ = [
    "POSTGRES_KEY_EXISTS",
    "PostgresBridge",
    "is_unique_violation",
]
