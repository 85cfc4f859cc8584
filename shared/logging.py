"""
structlog setup for the identity service.

Output is pretty console lines in development and one JSON object per line
when LOG_FORMAT=json. Every event passes through redact_sensitive_fields, so
passwords, one-time codes and JWTs never reach the sink; this is also why log
keys elsewhere avoid words like "token" (use ``record_id``, not ``token_id``).

Nothing is configured at import time. create_app() calls setup_logging();
before that structlog's defaults apply, which is what unit tests run with.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

REDACTED = "***REDACTED***"

# Exact key names that are always masked
REDACTED_FIELDS = frozenset(
    {
        "password",
        "new_password",
        "code",
        "otp",
        "authorization",
        "cookie",
    }
)

# Any key containing one of these is masked too (password_hash, refresh_token, api_key...)
_SENSITIVE_FRAGMENTS = ("password", "token", "secret", "key")

_STRUCTURAL_KEYS = frozenset({"event", "level", "logger", "timestamp"})

_NOISY_LOGGERS = ("httpx", "httpcore", "pymongo")


def get_logger(name: str) -> BoundLogger:
    """``log = get_logger(__name__)`` at module top, as every module here does."""
    return structlog.get_logger(name)


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return lowered in REDACTED_FIELDS or any(f in lowered for f in _SENSITIVE_FRAGMENTS)


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key in list(event_dict):
        if key not in _STRUCTURAL_KEYS and _is_sensitive(key):
            event_dict[key] = REDACTED
    return event_dict


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True, pad_event=15, sort_keys=False)


def configure_structlog(log_format: str = "console") -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            redact_sensitive_fields,
            structlog.processors.format_exc_info,
            _renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging to stdout at *log_level*; third-party chatter stays at WARNING."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    env: Optional[str] = None,
) -> None:
    configure_stdlib_logging(log_level)
    configure_structlog(log_format)
    get_logger(__name__).info(
        "logging_initialized", env=env, log_level=log_level, log_format=log_format
    )
