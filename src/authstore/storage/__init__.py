"""Backend-independent user and session storages."""

from authstore.storage.sessions import SQLSessionStorage
from authstore.storage.users import SQLUserStorage

__all__ = [
    "SQLUserStorage",
    "SQLSessionStorage",
]
