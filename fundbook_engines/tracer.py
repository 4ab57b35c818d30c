"""
fundbook_engines.tracer -- Engine invocation tracer emitting FUNDBOOK_ENGINE_TRACE.

Responsibility:
    Provide a decorator (``@traced_engine``) that wraps pure engine
    invocations with one structured trace record: engine_name,
    engine_version, input_fingerprint (deterministic SHA-256 of selected
    arguments) and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; engines stay free of I/O.

Invariants enforced:
    - Fingerprints are deterministic: ``_canonicalize`` sorts dict keys,
      renders Decimals by value and dataclasses field by field.
    - The decorator never mutates arguments or results.
    - An override parameter left at ``None`` is fingerprinted with the
      engine's own setting of the same name (``self.window_days`` ...).
    - One-shot iterators are fingerprinted by type only and never consumed.

Failure modes:
    - A fingerprint field that is not a parameter of the wrapped function
      is recorded as "null".
    - Exceptions raised by the engine propagate unchanged; no trace record
      is emitted for a failed call.

Usage:
    from fundbook_engines.tracer import traced_engine

    @traced_engine("ledger_balances", "1.0", fingerprint_fields=("as_of",))
    def compute_balances(self, accounts, postings, as_of):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Collection, Iterator
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from fundbook_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    """Stable string form of ``value`` for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return type(value).__name__ + _canonicalize(fields)
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonicalize(v) for v in value)) + "}"
    if isinstance(value, Collection):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    if isinstance(value, Iterator):
        return f"<{type(value).__name__}>"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """
    16-hex-char SHA-256 prefix over the named ``arguments``.

    Only the fields listed in ``fingerprint_fields`` are included; missing
    fields are recorded as "null".
    """
    parts: list[str] = []
    for field in fingerprint_fields:
        parts.append(f"{field}={_canonicalize(arguments.get(field))}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def _effective_arguments(
    bound: inspect.BoundArguments,
    fingerprint_fields: tuple[str, ...],
) -> dict[str, Any]:
    arguments = dict(bound.arguments)
    owner = arguments.get("self")
    if owner is not None:
        for field in fingerprint_fields:
            if arguments.get(field) is None and hasattr(owner, field):
                arguments[field] = getattr(owner, field)
    return arguments


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits FUNDBOOK_ENGINE_TRACE for engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "reconciliation_matcher").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names (positional or keyword) to
            include in the input fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fp = compute_input_fingerprint(
                    fingerprint_fields, _effective_arguments(bound, fingerprint_fields),
                )

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "FUNDBOOK_ENGINE_TRACE",
                extra={
                    "trace_type": "FUNDBOOK_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
