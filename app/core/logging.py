"""Logging for the Tyre Manager API.

Every line goes through the ``tyre_api`` logger as ``KIND key=value ...`` so
request, database, auth and calculator events can be grepped by kind.
"""

import logging
import sys
from typing import Any

from app.config import get_settings

LOGGER_NAME = "tyre_api"

# supabase-py talks to PostgREST and GoTrue over httpx, which logs every call
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger


logger = setup_logging(get_settings().log_level)


def _fields(**kwargs: Any) -> str:
    """Render ``key=value`` pairs, dropping None values."""
    parts = []
    for key, value in kwargs.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = f"{value:.2f}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


def _emit(level: int, kind: str, head: str, **kwargs: Any) -> None:
    logger.log(level, f"{kind} {head} {_fields(**kwargs)}".strip())


def log_request(method: str, path: str, **kwargs: Any) -> None:
    _emit(logging.INFO, "REQUEST", f"{method} {path}", **kwargs)


def log_response(method: str, path: str, status: int, duration_ms: float) -> None:
    """Server errors log at ERROR, client errors at WARNING."""
    if status >= 500:
        level = logging.ERROR
    elif status >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    _emit(level, "RESPONSE", f"{method} {path}", status=status, duration_ms=duration_ms)


def log_error(message: str, exc: Exception | None = None, **kwargs: Any) -> None:
    logger.error(f"ERROR {message} {_fields(**kwargs)}".strip(), exc_info=exc)


def log_db_query(
    operation: str, table: str, rows: int | None = None, duration_ms: float | None = None
) -> None:
    _emit(logging.DEBUG, "DB", operation, table=table, rows=rows, duration_ms=duration_ms)


def log_auth_call(operation: str, success: bool, duration_ms: float | None = None) -> None:
    """Record a call to Supabase Auth. Failures log at WARNING."""
    _emit(
        logging.INFO if success else logging.WARNING,
        "AUTH",
        operation,
        status="success" if success else "failed",
        duration_ms=duration_ms,
    )


def log_calculation(old_size: str, new_size: str, outcome: str) -> None:
    """Record a tyre size comparison.

    ``outcome`` is ``compatible``, ``incompatible``, ``invalid_format`` or
    ``zero_diameter``.
    """
    _emit(logging.INFO, "CALC", f"old={old_size!r} new={new_size!r}", result=outcome)
