"""Backend registry and storage factories.

Consumers should never hard-code backend modules.  The registry maps backend
names to the two collaborators a storage needs (query-set factories and a
bridge); ``create_user_storage()`` / ``create_session_storage()`` assemble a
ready storage from a backend name and :class:`StoreSettings`.

Pre-registered backends:
    - ``postgresql`` / ``postgres`` (psycopg 3)
    - ``sqlite`` (stdlib sqlite3)

Examples:
    >>> conn, info = create_connection("sqlite:///auth.db")
    >>> users = create_user_storage(conn, info.backend)
    >>> sessions = create_session_storage(conn, info.backend)
    >>> users.init_schema(); sessions.init_schema()

Tags:
    registry, factory, backend, authstore
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from authstore.backends.postgresql import (
    PostgresBridge,
    postgres_session_queries,
    postgres_user_queries,
)
from authstore.backends.sqlite import SQLiteBridge, sqlite_session_queries, sqlite_user_queries
from authstore.core.errors import ConfigError
from authstore.core.models import DEFAULT_USER_COLUMNS
from authstore.core.protocols import Bridge
from authstore.core.queries import SQLSessionQueries, SQLUserQueries
from authstore.core.settings import StoreSettings, get_settings
from authstore.storage import SQLSessionStorage, SQLUserStorage


@dataclass(frozen=True)
class Backend:
    """Everything a storage needs from one database backend."""

    name: str
    user_queries: Callable[..., SQLUserQueries]
    session_queries: Callable[..., SQLSessionQueries]
    bridge: Callable[[], Bridge]


class BackendRegistry:
    """Registry of named backends."""

    def __init__(self):
        self._backends: dict[str, Backend] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        postgres = Backend(
            name="postgresql",
            user_queries=postgres_user_queries,
            session_queries=postgres_session_queries,
            bridge=PostgresBridge,
        )
        self._backends["postgresql"] = postgres
        self._backends["postgres"] = postgres  # Alias
        self._backends["sqlite"] = Backend(
            name="sqlite",
            user_queries=sqlite_user_queries,
            session_queries=sqlite_session_queries,
            bridge=SQLiteBridge,
        )

    def register(self, name: str, backend: Backend) -> None:
        """Register a backend (replaces an existing one of the same name)."""
        self._backends[name.lower()] = backend

    def get(self, name: str) -> Backend:
        name = name.lower()
        if name not in self._backends:
            raise ConfigError(f"Unknown database backend: {name}")
        return self._backends[name]

    def list_backends(self) -> list[str]:
        return sorted(self._backends.keys())


# Global registry
backend_registry = BackendRegistry()


def get_backend(name: str) -> Backend:
    """Look up a backend in the global registry."""
    return backend_registry.get(name)


def _replace_mapping(
    settings: StoreSettings, replace_mapping: Mapping[str, str] | None
) -> dict[str, str]:
    mapping = settings.replace_mapping()
    if replace_mapping:
        mapping.update(replace_mapping)
    return mapping


def create_user_storage(
    conn,
    backend: str = "postgresql",
    settings: StoreSettings | None = None,
    *,
    replace_mapping: Mapping[str, str] | None = None,
    column_map: Mapping[str, str] = DEFAULT_USER_COLUMNS,
) -> SQLUserStorage:
    """Build a user storage for *backend* on the borrowed *conn*.

    *replace_mapping* entries override the ones derived from *settings*.
    """
    settings = settings or get_settings()
    entry = get_backend(backend)
    queries = entry.user_queries(
        _replace_mapping(settings, replace_mapping),
        column_map=column_map,
        partial_updates=settings.partial_updates,
    )
    return SQLUserStorage(conn, queries, entry.bridge(), commit=settings.commit)


def create_session_storage(
    conn,
    backend: str = "postgresql",
    settings: StoreSettings | None = None,
    *,
    replace_mapping: Mapping[str, str] | None = None,
) -> SQLSessionStorage:
    """Build a session storage for *backend* on the borrowed *conn*."""
    settings = settings or get_settings()
    entry = get_backend(backend)
    queries = entry.session_queries(_replace_mapping(settings, replace_mapping))
    return SQLSessionStorage(conn, queries, entry.bridge(), commit=settings.commit)


__all__ = [
    "Backend",
    "BackendRegistry",
    "backend_registry",
    "get_backend",
    "create_user_storage",
    "create_session_storage",
]
