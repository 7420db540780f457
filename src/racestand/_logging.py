"""Engine call logging for the standings and scenario queries."""

from __future__ import annotations

import functools
import logging
import os
import threading
import time
from typing import Any, Callable, TypeVar

from pydantic import BaseModel

from racestand.constants import LOG_DIR_ENV_VAR, LOG_FILE_NAME

F = TypeVar("F", bound=Callable[..., Any])

LOGGER_NAME = "racestand.engine"

# File logging is opt-in: without a log directory the engine writes nothing
_LOG_DIR: str | None = os.environ.get(LOG_DIR_ENV_VAR) or None
_LOG_FILE: str | None = os.path.join(_LOG_DIR, LOG_FILE_NAME) if _LOG_DIR else None

_logger: logging.Logger | None = None
_logger_lock = threading.Lock()


def get_logger() -> logging.Logger:
    """Return the engine logger, creating log dir and handler on first use.

    A file handler is attached when a log directory is configured
    (``RACESTAND_LOG_DIR``); otherwise records go to a NullHandler.
    """
    global _logger
    if _logger is not None:
        return _logger

    with _logger_lock:
        if _logger is not None:
            return _logger

        _logger = logging.getLogger(LOGGER_NAME)
        _logger.setLevel(logging.DEBUG)
        _logger.propagate = False

        if not _logger.handlers:
            if _LOG_DIR and _LOG_FILE:
                os.makedirs(_LOG_DIR, exist_ok=True)
                handler: logging.Handler = logging.FileHandler(_LOG_FILE, encoding="utf-8")
                handler.setFormatter(
                    logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"),
                )
            else:
                handler = logging.NullHandler()
            _logger.addHandler(handler)

    return _logger


def _summarise(result: Any) -> str:
    if isinstance(result, (list, tuple)):
        return f"{len(result)} items"
    for attr in ("status", "outcome"):
        value = getattr(result, attr, None)
        if value is not None:
            return str(getattr(value, "value", value))
    return "1 item"


def log_engine_call(fn: F) -> F:
    """Decorator that logs engine queries to the engine log file."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = get_logger()
        # Config and competitor lists are summarised, not dumped
        arg_parts = [_short_repr(a) for a in args]
        arg_parts += [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
        arg_str = ", ".join(arg_parts)
        logger.info("CALL: %s(%s)", fn.__qualname__, arg_str)

        start = time.monotonic()
        try:
            result = fn(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info(
                "OK: %s(%s) -> %s (%.3fs)",
                fn.__qualname__, arg_str, _summarise(result), elapsed,
            )
            return result
        except Exception as exc:
            elapsed = time.monotonic() - start
            logger.error(
                "FAIL: %s(%s) -> %s: %s (%.3fs)",
                fn.__qualname__, arg_str, type(exc).__name__, exc, elapsed,
            )
            raise

    return wrapper  # type: ignore[return-value]


def _short_repr(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return f"<{len(value)} items>"
    name = getattr(value, "name", None)
    if name is not None and isinstance(value, BaseModel):
        return f"<{type(value).__name__} {name!r}>"
    return repr(value)
