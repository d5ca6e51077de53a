"""
structlog setup for authstore.

Storages log through module loggers (``get_logger(__name__)``) with an event
name plus key/values::

    logger.info("user_inserted", user_id=42, username="alice")

Nothing is configured on import; applications call :func:`configure_logging`
(or ``StoreSettings().configure_logging()``) once at startup.  JSON output
uses ECS field names::

    {"@timestamp": "...", "log.level": "info", "service.name": "authstore",
     "event": "user_inserted", "user_id": 42, "username": "alice"}

Guardrails:
    ❌ DON'T: Pass password hashes, session payloads or connection URLs as log
             values (``redact_secrets`` masks the usual key names anyway)
    ✅ DO: Log ids, usernames and error categories

Tags:
    logging, structlog, observability, authstore
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SECRET_KEYS = frozenset({"password", "session_data", "database_url", "dsn"})
REDACTED = "***"


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask values whose key names a secret."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _service_processor(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename ``timestamp`` / ``level`` to their ECS equivalents."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "authstore",
) -> None:
    """Configure structlog (and the stdlib root logger it writes through).

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_format: JSON lines if True, coloured console if False; None picks
            JSON unless stdout is a terminal
        service: Value of the ``service.name`` field
    """
    numeric_level = logging.getLevelName(level.upper())
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _service_processor(service),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_format:
        processors += [ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def log_context(**kwargs: Any):
    """Context manager binding *kwargs* to every log line inside it.

    Example:
        with log_context(operation="init_schema"):
            users.init_schema()
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


__all__ = [
    "REDACTED",
    "SECRET_KEYS",
    "configure_logging",
    "ecs_field_names",
    "get_logger",
    "log_context",
    "redact_secrets",
]
