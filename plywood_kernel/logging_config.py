"""
Structured JSON logging for the plywood kernel.

Every record under the ``plywood_kernel`` logger is written as one JSON
line.  Operation-scoped fields (correlation, operator, lot, stage, ledger
entry) live in a single ContextVar, so threads serving concurrent debits
never see each other's context.  Context fields win over ``extra`` keys of
the same name.
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
from types import MappingProxyType
from typing import Any

_LOGGER_PREFIX = "plywood_kernel"

CONTEXT_FIELDS = ("correlation_id", "actor_id", "lot_id", "stage", "entry_id")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("plywood_log_context", default=_EMPTY)


def _known(fields: dict[str, Any]) -> dict[str, str]:
    return {k: str(v) for k, v in fields.items() if k in CONTEXT_FIELDS and v is not None}


class LogContext:
    """Operation-scoped log fields, safe across threads and tasks."""

    @staticmethod
    def set(**fields: Any) -> None:
        """Merge non-None known fields into the current context."""
        _context.set(MappingProxyType({**_context.get(), **_known(fields)}))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Set fields for the duration of a block, then restore the previous context."""
        token = _context.set(MappingProxyType({**_context.get(), **_known(fields)}))
        try:
            yield
        finally:
            _context.reset(token)


# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "taskName",
}


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Kernel errors keep their context (lot_id, warehouse, ...) as attributes
    for key, value in vars(exc).items():
        if not key.startswith("_") and key != "code":
            fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; UUIDs, Decimals and datetimes become strings."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def _to_json(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def get_logger(name: str) -> logging.Logger:
    """Logger under the plywood_kernel namespace, e.g. ``services.quality_gate``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the plywood_kernel logger.

    Only the first call has any effect.  The handler defaults to stderr.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

        root = logging.getLogger(_LOGGER_PREFIX)
        root.setLevel(level)
        root.propagate = False
        sink = handler if handler is not None else logging.StreamHandler(sys.stderr)
        sink.setFormatter(StructuredFormatter())
        root.addHandler(sink)


def reset_logging() -> None:
    """Undo configure_logging. Tests only."""
    global _configured
    with _lock:
        _configured = False
        root = logging.getLogger(_LOGGER_PREFIX)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
