"""Structured logging configuration for EZSOP.

Every record is emitted as one JSON line carrying the event name, the
per-request ambient context (user/org/request ids) and optional metadata.
The ambient context lives in a ContextVar, so each request (and each asyncio
task spawned from it) sees its own copy.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("ezsop_log_context", default={})

_LEVEL_ALIASES = {
    "FATAL": logging.CRITICAL,
    "WARN": logging.WARNING,
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON object."""
        log_data: dict[str, Any] = {
            "level": record.levelname,
            "event": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "logger": record.name,
            "context": dict(getattr(record, "context", None) or _log_context.get()),
        }

        if hasattr(record, "metadata") and record.metadata:
            log_data["metadata"] = record.metadata

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def resolve_level(raw: str | None, env: str) -> int:
    """
    Resolve the minimum log level.

    Args:
        raw: Configured level name (may be None or unknown)
        env: Deployment environment

    Returns:
        logging level constant
    """
    if raw:
        name = raw.strip().upper()
        if name in _LEVEL_ALIASES:
            return _LEVEL_ALIASES[name]
        level = logging.getLevelName(name)
        if isinstance(level, int):
            return level
    return logging.DEBUG if env == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        try:
            from app.core.config import get_settings

            settings = get_settings()
            logger.setLevel(resolve_level(settings.LOG_LEVEL, settings.EZSOP_ENV))
        except Exception:
            # Default to INFO if settings not available
            logger.setLevel(logging.INFO)

    return logger


def get_log_context() -> dict[str, Any]:
    """Return a copy of the ambient context for the current request."""
    return dict(_log_context.get())


def set_log_context(**fields: Any) -> None:
    """Merge fields into the ambient context of the current request."""
    _log_context.set({**_log_context.get(), **fields})


def clear_log_context() -> None:
    """Drop all ambient context for the current request."""
    _log_context.set({})


def log_event(logger: logging.Logger, level: int, event: str, **metadata: Any) -> None:
    """
    Log a named event with metadata fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        event: snake_case event name
        **metadata: Additional fields (e.g., sop_id, step_count)
    """
    logger.log(level, event, extra={"metadata": metadata, "context": get_log_context()})
