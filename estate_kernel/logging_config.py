"""
Structured JSON logging for the estate kernel.

Every logger lives under the ``estate_kernel`` namespace and writes one JSON
object per line. Call-scoped fields (an import run's correlation id, the
producing component, the entity being touched) travel in ``LogContext`` and
are merged into every record emitted inside that scope.

Usage::

    logger = get_logger("ingestion.import_service")
    with LogContext.bind(correlation_id=run_id, producer="ingestion"):
        logger.info("import_started", extra={"sheets": 2})
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
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

LOGGER_NAMESPACE = "estate_kernel"

# ---------------------------------------------------------------------------
# Call-scoped context
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("estate_log_context", default=_EMPTY)


class LogContext:
    """
    Call-scoped log fields: one import run, one allocation, one CRUD call.

    The fields are held as one immutable mapping in a ContextVar, so nested
    ``bind`` blocks layer on top of each other and unwind cleanly.
    """

    FIELDS = ("correlation_id", "producer", "entity_id", "import_kind")

    @classmethod
    def _merged(cls, fields: Mapping[str, str | None]) -> Mapping[str, str]:
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"unknown log context field(s): {', '.join(sorted(unknown))}")
        current = dict(_context.get())
        current.update({k: str(v) for k, v in fields.items() if v is not None})
        return MappingProxyType(current)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Update fields for the rest of the current context. None leaves a field as is."""
        _context.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON lines
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else on a record came in via ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Type, message, ``code`` and public attributes of a raised exception."""
    fields: dict[str, Any] = {"exc_type": type(exc).__name__, "exc_message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if name != "code" and not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, then context, then ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_jsonable, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    """Logger ``estate_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Route the ``estate_kernel`` hierarchy to one JSON handler.

    Idempotent: a second call is a no-op until ``reset_logging()``.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is not None:
            return
        _installed_handler = handler or logging.StreamHandler(stream or sys.stderr)
        _installed_handler.setFormatter(StructuredFormatter())

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(level)
        namespace.propagate = False
        namespace.addHandler(_installed_handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. Tests only."""
    global _installed_handler
    with _setup_lock:
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.handlers.clear()
        namespace.setLevel(logging.WARNING)
        namespace.propagate = True
        _installed_handler = None
