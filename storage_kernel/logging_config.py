"""
Structured JSON logging for the storage kernel.

Every record under the ``storage_kernel`` logger is written as one JSON
object carrying the timestamp, level, logger name and message, the
request fields bound in LogContext (correlation_id, username, app,
operation), and any ``extra`` fields passed at the call site.

Usage:
    logger = get_logger("services.store")
    with LogContext.bind(correlation_id=cid, username="alice", app="bench"):
        logger.info("items_stored", extra={"count": 3})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

_LOGGER_PREFIX = "storage_kernel"

# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})

_context: ContextVar[Mapping[str, str]] = ContextVar("storage_log_context", default=_EMPTY)


class LogContext:
    """
    Request fields copied into every log line.

    Backed by one ContextVar holding a read-only mapping, so each thread
    and asyncio task sees only the fields bound in its own flow.
    """

    FIELDS = ("correlation_id", "username", "app", "operation")

    @classmethod
    def _merged(cls, fields: Mapping[str, str | None]) -> Mapping[str, str]:
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = dict(_context.get())
        merged.update({k: v for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set fields for the rest of the current flow; None values are skipped."""
        _context.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        current = _context.get()
        return {name: current[name] for name in cls.FIELDS if name in current}

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Bind fields for the duration of a ``with`` block, then restore."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    # Address, Size, LocationIdentifier and the like log as their text form
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for key, value in vars(exc).items():
        if not key.startswith("_"):
            fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base fields, LogContext, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """``get_logger("services.store")`` -> ``storage_kernel.services.store``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_handler: logging.Handler | None = None
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach the JSON handler to the ``storage_kernel`` logger.

    Only the first call has any effect until ``reset_logging``.  ``level``
    may be a level number or a name such as ``"DEBUG"``.
    """
    global _handler
    with _lock:
        if _handler is not None:
            return
        _handler = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        kernel_logger = logging.getLogger(_LOGGER_PREFIX)
        kernel_logger.setLevel(level.upper() if isinstance(level, str) else level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(_handler)


def reset_logging() -> None:
    """Detach the handler and restore defaults. FOR TESTING ONLY."""
    global _handler
    with _lock:
        kernel_logger = logging.getLogger(_LOGGER_PREFIX)
        if _handler is not None:
            kernel_logger.removeHandler(_handler)
            _handler = None
        kernel_logger.setLevel(logging.WARNING)
        kernel_logger.propagate = True
