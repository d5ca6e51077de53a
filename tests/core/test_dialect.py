"""Tests for the Dialect abstraction layer."""

from __future__ import annotations

import pytest

from authstore.core.dialect import Dialect, PostgreSQLDialect, SQLiteDialect, get_dialect


@pytest.fixture(params=["sqlite", "postgresql"])
def dialect(request: pytest.FixtureRequest) -> Dialect:
    """Parametric fixture: run each test against every dialect."""
    return get_dialect(request.param)


class TestPlaceholders:
    def test_sqlite(self):
        d = SQLiteDialect()
        assert d.placeholder(0) == "?"
        assert d.placeholders(3) == "?, ?, ?"

    def test_postgresql(self):
        d = PostgreSQLDialect()
        assert d.placeholder(5) == "%s"
        assert d.placeholders(3) == "%s, %s, %s"

    def test_zero_count(self, dialect: Dialect):
        assert dialect.placeholders(0) == ""

    def test_count_matches(self, dialect: Dialect):
        assert len(dialect.placeholders(10).split(", ")) == 10


class TestRegistry:
    def test_postgres_alias(self):
        assert get_dialect("postgres").name == "postgresql"

    def test_case_insensitive(self):
        assert get_dialect("SQLite").name == "sqlite"

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown dialect"):
            get_dialect("oracle")

    def test_protocol(self, dialect: Dialect):
        assert isinstance(dialect, Dialect)
