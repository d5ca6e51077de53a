"""Database backends: query templates and bridges per driver."""

from authstore.backends.registry import (
    Backend,
    BackendRegistry,
    backend_registry,
    create_session_storage,
    create_user_storage,
    get_backend,
)

__all__ = [
    "Backend",
    "BackendRegistry",
    "backend_registry",
    "get_backend",
    "create_user_storage",
    "create_session_storage",
]
