"""SQLite statement templates (``?`` parameters).

Timestamps are stored as fixed-width ISO-8601 TEXT in UTC, so ``<=`` on the
column orders the same way the datetimes do.  Booleans are INTEGER 0/1.
"""

from __future__ import annotations

from collections.abc import Mapping

from authstore.core.dialect import SQLiteDialect
from authstore.core.models import DEFAULT_USER_COLUMNS
from authstore.core.queries import (
    SessionTemplates,
    SQLSessionQueries,
    SQLUserQueries,
    UserTemplates,
)

USERS_INIT = """CREATE TABLE IF NOT EXISTS $USERS_TABLE_NAME$ (
$ID_COLUMN$ INTEGER PRIMARY KEY AUTOINCREMENT,
$USERNAME_COLUMN$ TEXT NOT NULL UNIQUE,
$PASSWORD_COLUMN$ TEXT NOT NULL,
$EMAIL_COLUMN$ TEXT NOT NULL $EMAIL_UNIQUE$,
$FIRST_NAME_COLUMN$ TEXT NOT NULL,
$LAST_NAME_COLUMN$ TEXT NOT NULL,
$IS_SUPERUSER_COLUMN$ INTEGER NOT NULL,
$IS_STAFF_COLUMN$ INTEGER NOT NULL,
$IS_ACTIVE_COLUMN$ INTEGER NOT NULL,
$DATE_JOINED_COLUMN$ TEXT NOT NULL,
$LAST_LOGIN_COLUMN$ TEXT NOT NULL
);"""

USERNAME_INDEX = (
    "CREATE INDEX IF NOT EXISTS $USERS_TABLE_NAME$_username_idx "
    "ON $USERS_TABLE_NAME$ ($USERNAME_COLUMN$);"
)

EMAIL_INDEX = (
    "CREATE INDEX IF NOT EXISTS $USERS_TABLE_NAME$_email_idx "
    "ON $USERS_TABLE_NAME$ ($EMAIL_COLUMN$);"
)

SESSIONS_INIT = """CREATE TABLE IF NOT EXISTS $SESSIONS_TABLE_NAME$ (
session_key TEXT PRIMARY KEY,
user_id INTEGER NOT NULL REFERENCES $USERS_TABLE_NAME$($ID_COLUMN$) ON DELETE CASCADE,
expire_date TEXT NOT NULL,
session_data TEXT NOT NULL
);"""

SESSION_USER_INDEX = (
    "CREATE INDEX IF NOT EXISTS $SESSIONS_TABLE_NAME$_user_idx "
    "ON $SESSIONS_TABLE_NAME$ (user_id);"
)

SESSION_EXPIRE_INDEX = (
    "CREATE INDEX IF NOT EXISTS $SESSIONS_TABLE_NAME$_expire_idx "
    "ON $SESSIONS_TABLE_NAME$ (expire_date);"
)

_SELECT_USER = "SELECT $ID_COLUMN$, $USER_COLUMNS$ FROM $USERS_TABLE_NAME$"

USER_TEMPLATES = UserTemplates(
    init=(USERS_INIT, USERNAME_INDEX, EMAIL_INDEX),
    fetch_by_id=f"{_SELECT_USER} WHERE $ID_COLUMN$=?;",
    fetch_by_username=f"{_SELECT_USER} WHERE $USERNAME_COLUMN$=?;",
    fetch_by_email=f"{_SELECT_USER} WHERE $EMAIL_COLUMN$=?;",
    insert="INSERT INTO $USERS_TABLE_NAME$ ($USER_COLUMNS$) VALUES ($USER_PLACEHOLDERS$);",
    update="UPDATE $USERS_TABLE_NAME$ SET $USER_ASSIGNMENTS$ WHERE $ID_COLUMN$=$ID_PARAM$;",
    delete="DELETE FROM $USERS_TABLE_NAME$ WHERE $ID_COLUMN$=?;",
    update_fields=(
        "UPDATE $USERS_TABLE_NAME$ SET $UPDATE_CONTENT$ WHERE $ID_COLUMN$=$ID_PARAM_NUM$;"
    ),
    returns_id=False,  # new id comes from cursor.lastrowid
)

SESSION_TEMPLATES = SessionTemplates(
    init=(SESSIONS_INIT, SESSION_USER_INDEX, SESSION_EXPIRE_INDEX),
    insert=(
        "INSERT INTO $SESSIONS_TABLE_NAME$ (session_key, user_id, expire_date, session_data) "
        "VALUES (?, ?, ?, ?);"
    ),
    fetch_by_key=(
        "SELECT session_key, user_id, expire_date, session_data "
        "FROM $SESSIONS_TABLE_NAME$ WHERE session_key=?;"
    ),
    delete_by_key="DELETE FROM $SESSIONS_TABLE_NAME$ WHERE session_key=?;",
    delete_for_user="DELETE FROM $SESSIONS_TABLE_NAME$ WHERE user_id=?;",
    clean_up="DELETE FROM $SESSIONS_TABLE_NAME$ WHERE expire_date<=?;",
)


def sqlite_user_queries(
    replace_mapping: Mapping[str, str] | None = None,
    *,
    column_map: Mapping[str, str] = DEFAULT_USER_COLUMNS,
    partial_updates: bool = True,
) -> SQLUserQueries:
    return SQLUserQueries(
        USER_TEMPLATES,
        SQLiteDialect(),
        replace_mapping,
        column_map=column_map,
        partial_updates=partial_updates,
    )


def sqlite_session_queries(
    replace_mapping: Mapping[str, str] | None = None,
) -> SQLSessionQueries:
    return SQLSessionQueries(SESSION_TEMPLATES, replace_mapping)


__all__ = [
    "USER_TEMPLATES",
    "SESSION_TEMPLATES",
    "sqlite_user_queries",
    "sqlite_session_queries",
]
