"""Query sets: SQL templates instantiated once per storage.

A backend describes its statements as :class:`UserTemplates` /
:class:`SessionTemplates`.  :class:`SQLUserQueries` and
:class:`SQLSessionQueries` render them with a
:class:`~authstore.core.templates.SQLTemplateReplacer` at construction time
and afterwards only hand out the finished strings.

Besides the deployment tokens (``$USERS_TABLE_NAME$``, ``$EMAIL_UNIQUE$``, ...)
user templates may use tokens computed from the column map:

==========================  ==================================================
Token                       Rendered as
==========================  ==================================================
``$USER_COLUMNS$``          ``username, password, email, ...``
``$USER_PLACEHOLDERS$``     ``%s, %s, %s, ...`` (one per column)
``$USER_ASSIGNMENTS$``      ``username=%s, password=%s, ...``
``$ID_PARAM$``              placeholder N+1, after every column
``$<FIELD>_COLUMN$``        column of one field, e.g. ``$EMAIL_COLUMN$``
``$ID_COLUMN$``             ``id`` (session templates get this one too)
==========================  ==================================================

The users table DDL, its indexes and the lookups are written against the
column tokens, so a renamed column is renamed everywhere.  The map must name
every mutable field.

The partial update template keeps ``$UPDATE_CONTENT$`` and ``$ID_PARAM_NUM$``
until :meth:`SQLUserQueries.update_fields` fills them per call.

Examples:
    >>> from authstore.backends.postgresql.queries import USER_TEMPLATES
    >>> queries = SQLUserQueries(USER_TEMPLATES, PostgreSQLDialect())
    >>> queries.update_fields(["first_name", "email"])
    'UPDATE auth_user SET first_name=%s, email=%s WHERE id=%s;'
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields as dataclass_fields
from types import MappingProxyType

from authstore.core.dialect import Dialect
from authstore.core.errors import InvalidConfigError, InvalidFieldError
from authstore.core.models import DEFAULT_USER_COLUMNS, USER_ID_COLUMN, UserModel
from authstore.core.templates import SQLTemplateReplacer, default_replacer

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_MUTABLE_USER_FIELDS = frozenset(f.name for f in dataclass_fields(UserModel)) - {"id"}


@dataclass(frozen=True)
class UserTemplates:
    """Statement templates for the users table of one backend."""

    init: tuple[str, ...]
    fetch_by_id: str
    fetch_by_username: str
    fetch_by_email: str
    insert: str
    update: str
    delete: str
    update_fields: str | None = None  # None: backend has no partial updates
    returns_id: bool = False  # insert yields the new id as a row


@dataclass(frozen=True)
class SessionTemplates:
    """Statement templates for the sessions table of one backend."""

    init: tuple[str, ...]
    insert: str
    fetch_by_key: str
    delete_by_key: str
    delete_for_user: str
    clean_up: str


def _check_column_map(column_map: Mapping[str, str]) -> Mapping[str, str]:
    if not column_map:
        raise InvalidConfigError("column_map", dict(column_map), "column map must not be empty")
    for field_name, column in column_map.items():
        if field_name not in _MUTABLE_USER_FIELDS:
            raise InvalidFieldError(field_name)
        if not _IDENTIFIER_RE.match(column):
            raise InvalidConfigError("column_map", column, f"invalid column name {column!r}")
    # every field is a NOT NULL column of the users table
    missing = sorted(_MUTABLE_USER_FIELDS - column_map.keys())
    if missing:
        raise InvalidConfigError(
            "column_map", missing, f"column map is missing fields: {', '.join(missing)}"
        )
    columns = [column.lower() for column in column_map.values()]
    if len(set(columns)) != len(columns) or USER_ID_COLUMN in columns:
        raise InvalidConfigError("column_map", dict(column_map), "column names must be distinct")
    return MappingProxyType(dict(column_map))


def _column_tokens(column_map: Mapping[str, str]) -> dict[str, str]:
    """``$<FIELD>_COLUMN$`` tokens for *column_map*, plus ``$ID_COLUMN$``."""
    tokens = {f"{name.upper()}_COLUMN": column for name, column in column_map.items()}
    tokens["ID_COLUMN"] = USER_ID_COLUMN
    return tokens


class SQLUserQueries:
    """Immutable query set for user operations.

    Parameters:
        templates: The backend's statement templates.
        dialect: Placeholder style of the backend.
        replace_mapping: Overrides for deployment tokens (table names,
                         ``EMAIL_UNIQUE``).  ``None`` keeps the defaults.
        column_map: Mutable field -> column name table, shared by full-row
                    statements and partial updates.
        partial_updates: Set ``False`` to always use the full-row update.
    """

    def __init__(
        self,
        templates: UserTemplates,
        dialect: Dialect,
        replace_mapping: Mapping[str, str] | None = None,
        *,
        column_map: Mapping[str, str] = DEFAULT_USER_COLUMNS,
        partial_updates: bool = True,
    ) -> None:
        self._dialect = dialect
        self._column_map = _check_column_map(column_map)
        self._returns_id = templates.returns_id

        columns = list(self._column_map.values())
        replacer = default_replacer(replace_mapping)
        replacer.update(_column_tokens(self._column_map))
        replacer.update(
            {
                "USER_COLUMNS": ", ".join(columns),
                "USER_PLACEHOLDERS": dialect.placeholders(len(columns)),
                "USER_ASSIGNMENTS": ", ".join(
                    f"{col}={dialect.placeholder(i)}" for i, col in enumerate(columns)
                ),
                "ID_PARAM": dialect.placeholder(len(columns)),
            }
        )
        self._replacer: SQLTemplateReplacer = replacer

        self._init = tuple(replacer.apply(stmt) for stmt in templates.init)
        self._fetch_by_id = replacer.apply(templates.fetch_by_id)
        self._fetch_by_username = replacer.apply(templates.fetch_by_username)
        self._fetch_by_email = replacer.apply(templates.fetch_by_email)
        self._insert = replacer.apply(templates.insert)
        self._update = replacer.apply(templates.update)
        self._delete = replacer.apply(templates.delete)
        self._update_fields = (
            replacer.apply(templates.update_fields)
            if partial_updates and templates.update_fields
            else ""
        )

    # -- Metadata ----------------------------------------------------------

    @property
    def column_map(self) -> Mapping[str, str]:
        return self._column_map

    @property
    def returns_id(self) -> bool:
        return self._returns_id

    @property
    def supports_partial_update(self) -> bool:
        return self._update_fields != ""

    @property
    def replacements(self) -> Mapping[str, str]:
        """Token values the query set was rendered with."""
        return self._replacer.values

    # -- Statements --------------------------------------------------------

    def init_statements(self) -> tuple[str, ...]:
        return self._init

    def fetch_by_id(self) -> str:
        return self._fetch_by_id

    def fetch_by_username(self) -> str:
        return self._fetch_by_username

    def fetch_by_email(self) -> str:
        return self._fetch_by_email

    def insert(self) -> str:
        return self._insert

    def update(self) -> str:
        return self._update

    def update_fields(self, fields: Sequence[str]) -> str:
        """UPDATE statement assigning only *fields*.

        Placeholders 1..N bind the field values in the given order, N+1 binds
        the id.  Falls back to :meth:`update` for empty *fields* or when
        partial updates are disabled.

        Raises:
            InvalidFieldError: If a field is not in the column map.
        """
        if not fields or not self.supports_partial_update:
            return self._update
        updates = []
        for i, field_name in enumerate(fields):
            column = self._column_map.get(field_name)
            if column is None:
                raise InvalidFieldError(field_name)
            updates.append(f"{column}={self._dialect.placeholder(i)}")
        stmt = self._update_fields.replace("$UPDATE_CONTENT$", ", ".join(updates), 1)
        return stmt.replace("$ID_PARAM_NUM$", self._dialect.placeholder(len(fields)), 1)

    def delete(self) -> str:
        return self._delete


class SQLSessionQueries:
    """Immutable query set for session operations."""

    def __init__(
        self,
        templates: SessionTemplates,
        replace_mapping: Mapping[str, str] | None = None,
    ) -> None:
        replacer = default_replacer(replace_mapping).update({"ID_COLUMN": USER_ID_COLUMN})
        self._init = tuple(replacer.apply(stmt) for stmt in templates.init)
        self._insert = replacer.apply(templates.insert)
        self._fetch_by_key = replacer.apply(templates.fetch_by_key)
        self._delete_by_key = replacer.apply(templates.delete_by_key)
        self._delete_for_user = replacer.apply(templates.delete_for_user)
        self._clean_up = replacer.apply(templates.clean_up)

    def init_statements(self) -> tuple[str, ...]:
        return self._init

    def insert(self) -> str:
        return self._insert

    def fetch_by_key(self) -> str:
        return self._fetch_by_key

    def delete_by_key(self) -> str:
        return self._delete_by_key

    def delete_for_user(self) -> str:
        return self._delete_for_user

    def clean_up(self) -> str:
        return self._clean_up


__all__ = [
    "UserTemplates",
    "SessionTemplates",
    "SQLUserQueries",
    "SQLSessionQueries",
]
