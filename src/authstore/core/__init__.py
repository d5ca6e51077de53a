"""authstore core -- backend-independent building blocks.

Architecture::

    Layer 1 -- Types & Errors
        errors.py        Structured error hierarchy (StoreError, ConflictError, ...)
        models.py        UserModel / SessionModel dataclasses, ZERO_TIME
        protocols.py     Connection, Bridge, query-provider protocols, ErrorKind

    Layer 2 -- SQL Text
        templates.py     $TOKEN$ replacement (table names, EMAIL_UNIQUE)
        dialect.py       Placeholder style per backend
        queries.py       Query sets rendered once from backend templates

    Layer 3 -- Plumbing
        repository.py    BaseRepository (commit / rollback policy)
        settings.py      StoreSettings (pydantic-settings, AUTHSTORE_*)
        logging.py       structlog configuration
"""

from authstore.core.dialect import Dialect, PostgreSQLDialect, SQLiteDialect, get_dialect
from authstore.core.errors import (
    AmbiguousCredentialsError,
    ConfigError,
    ConflictError,
    ConversionError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    InvalidFieldError,
    NotFoundError,
    QueryError,
    SchemaInitError,
    SessionExistsError,
    SessionNotFoundError,
    StoreError,
    TimeConversionError,
    TransientError,
    UserExistsError,
    UserNotFoundError,
    categorize_error,
    is_retryable,
)
from authstore.core.models import (
    DEFAULT_USER_COLUMNS,
    ZERO_TIME,
    SessionModel,
    UserModel,
    utc_now,
)
from authstore.core.protocols import (
    Bridge,
    Connection,
    ErrorKind,
    SessionQueryProvider,
    UserQueryProvider,
)
from authstore.core.queries import (
    SessionTemplates,
    SQLSessionQueries,
    SQLUserQueries,
    UserTemplates,
)
from authstore.core.templates import SQLTemplateReplacer, default_replacer

__all__ = [
    # dialect
    "Dialect",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
    # errors
    "ErrorCategory",
    "ErrorContext",
    "StoreError",
    "TransientError",
    "DatabaseConnectionError",
    "ConflictError",
    "UserExistsError",
    "AmbiguousCredentialsError",
    "SessionExistsError",
    "NotFoundError",
    "UserNotFoundError",
    "SessionNotFoundError",
    "ConfigError",
    "InvalidFieldError",
    "InvalidConfigError",
    "ConversionError",
    "TimeConversionError",
    "DatabaseError",
    "QueryError",
    "SchemaInitError",
    "is_retryable",
    "categorize_error",
    # models
    "ZERO_TIME",
    "utc_now",
    "UserModel",
    "SessionModel",
    "DEFAULT_USER_COLUMNS",
    # protocols
    "Connection",
    "ErrorKind",
    "Bridge",
    "UserQueryProvider",
    "SessionQueryProvider",
    # queries
    "UserTemplates",
    "SessionTemplates",
    "SQLUserQueries",
    "SQLSessionQueries",
    # templates
    "SQLTemplateReplacer",
    "default_replacer",
]
