"""PostgreSQL backend (psycopg 3)."""

from authstore.backends.postgresql.bridge import POSTGRES_KEY_EXISTS, PostgresBridge
from authstore.backends.postgresql.queries import (
    SESSION_TEMPLATES,
    USER_TEMPLATES,
    postgres_session_queries,
    postgres_user_queries,
)

__all__ = [
    "POSTGRES_KEY_EXISTS",
    "PostgresBridge",
    "USER_TEMPLATES",
    "SESSION_TEMPLATES",
    "postgres_user_queries",
    "postgres_session_queries",
]
