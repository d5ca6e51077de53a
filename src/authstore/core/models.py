"""User and session models.

Plain dataclasses; the storages map them to and from rows.  Field names are
also the names accepted by partial updates (``fields=["first_name"]``).

Timestamps are timezone-aware UTC datetimes.  ``ZERO_TIME`` marks a user that
never logged in.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


@dataclass
class UserModel:
    """User row (``auth_user``)."""

    id: int | None = None  # None until persisted
    username: str = ""
    password: str = ""  # hash, never plaintext
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    is_superuser: bool = False
    is_staff: bool = False
    is_active: bool = True
    date_joined: datetime = ZERO_TIME
    last_login: datetime = ZERO_TIME

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


@dataclass
class SessionModel:
    """Session row (``auth_session``)."""

    key: str = ""
    user_id: int = 0
    expire_date: datetime = ZERO_TIME
    data: dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expire_date <= (now or utc_now())


# Mutable user fields -> column names, in insert/update parameter order.
DEFAULT_USER_COLUMNS: Mapping[str, str] = MappingProxyType(
    {
        "username": "username",
        "password": "password",
        "email": "email",
        "first_name": "first_name",
        "last_name": "last_name",
        "is_superuser": "is_superuser",
        "is_staff": "is_staff",
        "is_active": "is_active",
        "date_joined": "date_joined",
        "last_login": "last_login",
    }
)

USER_ID_COLUMN = "id"

# Fields that go through Bridge.convert_time before binding.
USER_TIME_FIELDS = frozenset({"date_joined", "last_login"})


__all__ = [
    "ZERO_TIME",
    "utc_now",
    "UserModel",
    "SessionModel",
    "DEFAULT_USER_COLUMNS",
    "USER_ID_COLUMN",
    "USER_TIME_FIELDS",
]
