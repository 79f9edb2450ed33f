"""Logging helpers using structlog."""

from __future__ import annotations

import hashlib
import logging
import sys
from typing import Any, TextIO

import structlog

# event keys whose values are replaced by a fingerprint before rendering
SECRET_KEYS = frozenset({"password", "master_token", "session_token", "token", "signing_key", "sig"})


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a configured structlog logger, configuring the stack on first use."""

    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)


def configure_logging(level: str | None = None, *, stream: TextIO | None = None) -> None:
    """Configure structlog and stdlib logging.

    ``level`` defaults to ``Settings.log_level`` (``PLAYMUSIC_LOG_LEVEL``).
    """

    if level is None:
        from playmusic.config import get_settings

        level = get_settings().log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    stream = stream or sys.stdout

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=numeric_level, format="%(message)s", stream=stream)


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = fingerprint(event_dict[key])
    return event_dict


def fingerprint(secret: str | bytes | None) -> str | None:
    """Short, non-reversible tag for a secret so log lines can be correlated."""

    if not secret:
        return None
    raw = secret.encode("utf-8") if isinstance(secret, str) else secret
    return hashlib.sha1(raw).hexdigest()[:8]
