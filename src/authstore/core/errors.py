"""
Structured error types for authstore.

Provides a hierarchy of typed errors with metadata for retry decisions,
error categorization and root cause analysis through error chaining.

Storages never leak raw driver exceptions for expected situations. A unique
constraint violation becomes a ``ConflictError``, a missing row becomes a
``NotFoundError`` and anything else the driver raises is wrapped in a
``QueryError`` whose ``cause`` is the original exception.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        StoreError                                │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConflictError          NotFoundError         DatabaseError     │
        │  (CONFLICT)             (NOT_FOUND)           (DATABASE)        │
        │       │                      │                     │            │
        │  UserExistsError        UserNotFoundError     QueryError        │
        │  SessionExistsError     SessionNotFoundError  SchemaInitError   │
        │  AmbiguousCredentials                                           │
        │                                                                  │
        │  ConfigError            ConversionError       TransientError    │
        │  (CONFIG)               (PARSE)               (retryable=True)  │
        │       │                      │                     │            │
        │  InvalidFieldError      TimeConversionError   DatabaseConnection│
        │  InvalidConfigError                                             │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = UserExistsError("username taken").with_context(table="auth_user")
    >>> error.category
    <ErrorCategory.CONFLICT: 'CONFLICT'>
    >>> error.context.table
    'auth_user'

    Chaining a driver error:

    >>> try:
    ...     raise OSError("server closed the connection")
    ... except OSError as e:
    ...     error = QueryError("fetch failed", cause=e)
    >>> error.cause
    OSError('server closed the connection')

Guardrails:
    ❌ DON'T: Raise the driver's IntegrityError from a storage method
    ✅ DO: Translate it through the bridge into a ConflictError subclass

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, domain-errors, authstore
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """What kind of failure an error represents; used for routing and logs."""

    DATABASE = "DATABASE"      # driver, query, DDL, connection
    CONFLICT = "CONFLICT"      # duplicate username / email / session key
    NOT_FOUND = "NOT_FOUND"    # zero rows
    VALIDATION = "VALIDATION"  # bad input
    PARSE = "PARSE"            # scanned value of unexpected shape
    CONFIG = "CONFIG"          # unknown field, invalid settings; never retryable
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Where an error happened.

    Only fields that are set appear in :meth:`to_dict`; ``metadata`` entries
    are merged in flat.  Never put password hashes or session data in here.
    """

    table: str | None = None
    operation: str | None = None
    user_id: int | None = None
    username: str | None = None
    session_key: str | None = None
    field: str | None = None
    metadata: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "metadata" and getattr(self, f.name) is not None
        }
        result.update(self.metadata)
        return result


class StoreError(Exception):
    """
    Root of every error raised by authstore.

    Subclasses pick ``default_category`` / ``default_retryable``; both can be
    overridden per instance.  ``cause`` is also set as ``__cause__``.

    Examples:
        >>> error = StoreError("Something went wrong")
        >>> error.category, error.retryable
        (<ErrorCategory.INTERNAL: 'INTERNAL'>, False)
        >>> error.to_dict()["error_type"]
        'StoreError'
    """

    default_category = ErrorCategory.INTERNAL
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = self.default_category if category is None else category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.context = ErrorContext() if context is None else context
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StoreError:
        """
        Fill in context fields and return self.

        Keys that are not ``ErrorContext`` fields go to ``metadata``::

            raise UserNotFoundError("no such user").with_context(user_id=42)
        """
        known = {f.name for f in fields(self.context)} - {"metadata"}
        for key, value in kwargs.items():
            if key in known:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for structured logs."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# -- Transient ---------------------------------------------------------------


class TransientError(StoreError):
    """Temporary failure; the caller may retry. authstore itself never does."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


class DatabaseConnectionError(TransientError):
    """The database refused or dropped the connection."""


# -- Conflicts (unique constraint violations, never retryable) ---------------


class ConflictError(StoreError):
    default_category = ErrorCategory.CONFLICT


class UserExistsError(ConflictError):
    """Insert collided with an existing username or email."""


class AmbiguousCredentialsError(ConflictError):
    """Update would give two users the same username or email."""


class SessionExistsError(ConflictError):
    """Insert collided with an existing session key."""


# -- Not found ---------------------------------------------------------------


class NotFoundError(StoreError):
    """A lookup matched zero rows."""

    default_category = ErrorCategory.NOT_FOUND


class UserNotFoundError(NotFoundError):
    pass


class SessionNotFoundError(NotFoundError):
    pass


# -- Programmer / configuration mistakes -------------------------------------


class ConfigError(StoreError):
    """The calling code or configuration must be fixed."""

    default_category = ErrorCategory.CONFIG


class InvalidFieldError(ConfigError):
    """Field name is not a mutable column of the user model."""

    def __init__(self, field_name: str, message: str | None = None):
        self.field_name = field_name
        super().__init__(
            message or f"invalid field name {field_name!r}: must be a mutable field of UserModel",
            context=ErrorContext(field=field_name),
        )


class InvalidConfigError(ConfigError):
    """A configuration value was rejected."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"invalid value for {key}: {value!r}")


# -- Conversion --------------------------------------------------------------


class ConversionError(StoreError):
    """A value read from the database does not have the expected shape."""

    default_category = ErrorCategory.PARSE


class TimeConversionError(ConversionError):
    """Temporal column scanned as something other than the bridge's scan type."""

    def __init__(self, value: Any, expected: type, message: str | None = None):
        self.value = value
        self.expected = expected
        super().__init__(
            message or f"expected value of {expected.__name__}, got {type(value).__name__}"
        )


# -- Database ----------------------------------------------------------------


class DatabaseError(StoreError):
    default_category = ErrorCategory.DATABASE


class QueryError(DatabaseError):
    """Driver error the bridge did not recognise; ``cause`` holds the original."""


class SchemaInitError(DatabaseError):
    """An init statement failed. Always fatal."""


def is_retryable(error: Exception) -> bool:
    """True for retryable StoreErrors and for plain connection failures."""
    if isinstance(error, StoreError):
        return error.retryable
    return isinstance(error, (ConnectionError, BrokenPipeError))


def categorize_error(error: Exception) -> ErrorCategory:
    if isinstance(error, StoreError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.DATABASE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
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
]
