"""
Structured JSON logging for the fundbook core.

Every log line is one JSON object: an envelope (``ts``, ``level``,
``logger``, ``message``), the fields bound in ``LogContext``, the record's
``extra`` payload, and for failures the exception's code and structured
attributes.

Context fields:
    correlation_id   caller's request or job id
    organization_id  tenant the computation runs for (always bound by the caller)
    actor_id         user who triggered the operation
    run_id           payroll batch (the journal entry id)
    session_id       bank reconciliation session
    entry_id         manual journal entry being posted

Services bind what they know around an operation::

    with LogContext.bind(run_id=entry_id):
        logger.info("payroll_batch_started", extra={...})

Money is logged as ``str`` so the JSON never carries a float.
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
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

from fundbook_kernel.exceptions import FundbookError


class LogContext:
    """Call-scoped log fields, safe across threads and asyncio tasks.

    All fields live in one immutable mapping held by a ContextVar, so a
    ``bind`` block restores exactly what was there before it.
    """

    FIELDS: tuple[str, ...] = (
        "correlation_id",
        "organization_id",
        "actor_id",
        "run_id",
        "session_id",
        "entry_id",
    )

    _current: ContextVar[Mapping[str, str]] = ContextVar(
        "fundbook_log_context", default=MappingProxyType({})
    )

    @classmethod
    def _merged(cls, fields: Mapping[str, object]) -> dict[str, str]:
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
        merged = dict(cls._current.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        return merged

    @classmethod
    def set(cls, **fields: object) -> None:
        """Update fields for the rest of the current context; ``None`` is ignored."""
        cls._current.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        current = cls._current.get()
        return {name: current[name] for name in cls.FIELDS if name in current}

    @classmethod
    def clear(cls) -> None:
        cls._current.set(MappingProxyType({}))

    @classmethod
    @contextmanager
    def bind(cls, **fields: object) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block."""
        token = cls._current.set(cls._merged(fields))
        try:
            yield cls
        finally:
            cls._current.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (Decimal, UUID)):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(str(item) for item in obj)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    if isinstance(exc, FundbookError):
        fields["exc_code"] = exc.code
        # Structured attributes set in each subclass __init__
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "fundbook"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``fundbook`` namespace, e.g. ``fundbook.engines.matching``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``fundbook`` logger. Idempotent.

    ``level`` takes a logging constant or a level name such as the
    ``logging.level`` setting (``"INFO"``, ``"debug"``).
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. For tests."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
