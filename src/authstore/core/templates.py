"""``$NAME$`` token replacement for SQL templates.

Backends ship their statements as templates in which deployment-specific
fragments appear as ``$NAME$`` tokens::

    CREATE TABLE IF NOT EXISTS $USERS_TABLE_NAME$ (
        ...
        email VARCHAR(254) NOT NULL $EMAIL_UNIQUE$,
        ...
    );

A :class:`SQLTemplateReplacer` holds the token values (built-in defaults
merged with caller overrides) and renders templates once, when a query set is
constructed.  It is never used per request.

Tokens the replacer does not know are left untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType

USERS_TABLE_NAME = "USERS_TABLE_NAME"
SESSIONS_TABLE_NAME = "SESSIONS_TABLE_NAME"
EMAIL_UNIQUE = "EMAIL_UNIQUE"

DEFAULT_REPLACEMENTS: Mapping[str, str] = MappingProxyType(
    {
        USERS_TABLE_NAME: "auth_user",
        SESSIONS_TABLE_NAME: "auth_session",
        EMAIL_UNIQUE: "UNIQUE",
    }
)

_TOKEN_RE = re.compile(r"\$([A-Z][A-Z0-9_]*)\$")


class SQLTemplateReplacer:
    """Substitutes ``$NAME$`` tokens with literal SQL fragments.

    Parameters:
        defaults: Base token values. Defaults to :data:`DEFAULT_REPLACEMENTS`.
    """

    def __init__(self, defaults: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(
            DEFAULT_REPLACEMENTS if defaults is None else defaults
        )

    @property
    def values(self) -> Mapping[str, str]:
        return MappingProxyType(self._values)

    def update(self, mapping: Mapping[str, str] | None) -> SQLTemplateReplacer:
        """Merge overrides into the token table. ``None`` is a no-op."""
        if mapping:
            self._values.update(mapping)
        return self

    def apply(self, template: str) -> str:
        """Render *template*, falling back to the defaults for every token."""

        def _sub(match: re.Match[str]) -> str:
            return self._values.get(match.group(1), match.group(0))

        return _TOKEN_RE.sub(_sub, template)


def default_replacer(overrides: Mapping[str, str] | None = None) -> SQLTemplateReplacer:
    """Replacer with the built-in defaults and *overrides* applied."""
    return SQLTemplateReplacer().update(overrides)


__all__ = [
    "USERS_TABLE_NAME",
    "SESSIONS_TABLE_NAME",
    "EMAIL_UNIQUE",
    "DEFAULT_REPLACEMENTS",
    "SQLTemplateReplacer",
    "default_replacer",
]
