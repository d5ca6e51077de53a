"""SQLite backend (stdlib sqlite3)."""

from authstore.backends.sqlite.bridge import SQLiteBridge
from authstore.backends.sqlite.queries import (
    SESSION_TEMPLATES,
    USER_TEMPLATES,
    sqlite_session_queries,
    sqlite_user_queries,
)

__all__ = [
    "SQLiteBridge",
    "USER_TEMPLATES",
    "SESSION_TEMPLATES",
    "sqlite_user_queries",
    "sqlite_session_queries",
]
