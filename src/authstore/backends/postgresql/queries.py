"""PostgreSQL statement templates.

Parameters use psycopg's ``%s`` style.  Row statements take their column
lists from the query set's column map (``$USER_COLUMNS$`` and friends, see
:mod:`authstore.core.queries`).
"""

from __future__ import annotations

from collections.abc import Mapping

from authstore.core.dialect import PostgreSQLDialect
from authstore.core.models import DEFAULT_USER_COLUMNS
from authstore.core.queries import (
    SessionTemplates,
    SQLSessionQueries,
    SQLUserQueries,
    UserTemplates,
)

USERS_INIT = """CREATE TABLE IF NOT EXISTS $USERS_TABLE_NAME$ (
$ID_COLUMN$ BIGSERIAL PRIMARY KEY,
$USERNAME_COLUMN$ VARCHAR(150) NOT NULL UNIQUE,
$PASSWORD_COLUMN$ VARCHAR(270) NOT NULL,
$EMAIL_COLUMN$ VARCHAR(254) NOT NULL $EMAIL_UNIQUE$,
$FIRST_NAME_COLUMN$ VARCHAR(50) NOT NULL,
$LAST_NAME_COLUMN$ VARCHAR(150) NOT NULL,
$IS_SUPERUSER_COLUMN$ BOOL NOT NULL,
$IS_STAFF_COLUMN$ BOOL NOT NULL,
$IS_ACTIVE_COLUMN$ BOOL NOT NULL,
$DATE_JOINED_COLUMN$ TIMESTAMP NOT NULL,
$LAST_LOGIN_COLUMN$ TIMESTAMP NOT NULL
);"""

USERNAME_INDEX = (
    "CREATE INDEX IF NOT EXISTS $USERS_TABLE_NAME$_username_idx "
    "ON $USERS_TABLE_NAME$ ($USERNAME_COLUMN$);"
)

EMAIL_INDEX = (
    "CREATE INDEX IF NOT EXISTS $USERS_TABLE_NAME$_email_idx "
    "ON $USERS_TABLE_NAME$ ($EMAIL_COLUMN$);"
)

SELECT_USER = "SELECT $ID_COLUMN$, $USER_COLUMNS$ FROM $USERS_TABLE_NAME$"

QUERY_USER_ID = f"{SELECT_USER} WHERE $ID_COLUMN$=%s;"

QUERY_USERNAME = f"{SELECT_USER} WHERE $USERNAME_COLUMN$=%s;"

QUERY_USER_EMAIL = f"{SELECT_USER} WHERE $EMAIL_COLUMN$=%s;"

INSERT_USER = """INSERT INTO $USERS_TABLE_NAME$ ($USER_COLUMNS$)
VALUES ($USER_PLACEHOLDERS$)
RETURNING $ID_COLUMN$;"""

UPDATE_USER = """UPDATE $USERS_TABLE_NAME$
SET $USER_ASSIGNMENTS$
WHERE $ID_COLUMN$=$ID_PARAM$;"""

DELETE_USER = "DELETE FROM $USERS_TABLE_NAME$ WHERE $ID_COLUMN$=%s;"

UPDATE_USER_FIELDS = (
    "UPDATE $USERS_TABLE_NAME$ SET $UPDATE_CONTENT$ WHERE $ID_COLUMN$=$ID_PARAM_NUM$;"
)

SESSIONS_INIT = """CREATE TABLE IF NOT EXISTS $SESSIONS_TABLE_NAME$ (
session_key VARCHAR(150) PRIMARY KEY,
user_id BIGINT NOT NULL REFERENCES $USERS_TABLE_NAME$($ID_COLUMN$) ON DELETE CASCADE,
expire_date TIMESTAMP NOT NULL,
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

INSERT_SESSION = """INSERT INTO $SESSIONS_TABLE_NAME$ (session_key, user_id, expire_date, session_data)
VALUES (%s, %s, %s, %s);"""

QUERY_SESSION = """SELECT session_key, user_id, expire_date, session_data
FROM $SESSIONS_TABLE_NAME$ WHERE session_key=%s;"""

DELETE_SESSION = "DELETE FROM $SESSIONS_TABLE_NAME$ WHERE session_key=%s;"

DELETE_USER_SESSIONS = "DELETE FROM $SESSIONS_TABLE_NAME$ WHERE user_id=%s;"

CLEAN_UP_SESSIONS = "DELETE FROM $SESSIONS_TABLE_NAME$ WHERE expire_date<=%s;"

USER_TEMPLATES = UserTemplates(
    init=(USERS_INIT, USERNAME_INDEX, EMAIL_INDEX),
    fetch_by_id=QUERY_USER_ID,
    fetch_by_username=QUERY_USERNAME,
    fetch_by_email=QUERY_USER_EMAIL,
    insert=INSERT_USER,
    update=UPDATE_USER,
    delete=DELETE_USER,
    update_fields=UPDATE_USER_FIELDS,
    returns_id=True,
)

SESSION_TEMPLATES = SessionTemplates(
    init=(SESSIONS_INIT, SESSION_USER_INDEX, SESSION_EXPIRE_INDEX),
    insert=INSERT_SESSION,
    fetch_by_key=QUERY_SESSION,
    delete_by_key=DELETE_SESSION,
    delete_for_user=DELETE_USER_SESSIONS,
    clean_up=CLEAN_UP_SESSIONS,
)


def postgres_user_queries(
    replace_mapping: Mapping[str, str] | None = None,
    *,
    column_map: Mapping[str, str] = DEFAULT_USER_COLUMNS,
    partial_updates: bool = True,
) -> SQLUserQueries:
    """User query set for PostgreSQL with *replace_mapping* applied."""
    return SQLUserQueries(
        USER_TEMPLATES,
        PostgreSQLDialect(),
        replace_mapping,
        column_map=column_map,
        partial_updates=partial_updates,
    )


def postgres_session_queries(
    replace_mapping: Mapping[str, str] | None = None,
) -> SQLSessionQueries:
    """Session query set for PostgreSQL with *replace_mapping* applied."""
    return SQLSessionQueries(SESSION_TEMPLATES, replace_mapping)


__all__ = [
    "USER_TEMPLATES",
    "SESSION_TEMPLATES",
    "postgres_user_queries",
    "postgres_session_queries",
]
