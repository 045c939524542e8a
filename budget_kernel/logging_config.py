"""
Structured JSON logging for the budget pricing engine.

Every record is rendered as one JSON object per line. Request-scoped
fields (which budget is being priced, which calculation run, the host's
correlation id) live in a single ``ContextVar`` so concurrent previews
served from one process never mix their records.

Fields the engines stamp themselves:
    calculation_id  one per GrandTotalCalculator.calculate() call
    budget_name     the snapshot's name, when it has one
    budget_source   the file a budget was loaded from

Fields a host may bind around its own request:
    correlation_id, budget_id
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

CONTEXT_FIELDS = frozenset({
    "correlation_id",
    "budget_id",
    "budget_name",
    "budget_source",
    "calculation_id",
})

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("budget_log_context", default=_EMPTY)


def _reject_unknown(fields: Mapping[str, Any]) -> None:
    unknown = set(fields) - CONTEXT_FIELDS
    if unknown:
        raise TypeError(f"Unknown log context fields: {sorted(unknown)}")


def _merged(fields: Mapping[str, Any]) -> Mapping[str, str]:
    current = dict(_context.get())
    current.update({k: str(v) for k, v in fields.items() if v is not None})
    return MappingProxyType(current)


class LogContext:
    """Request-scoped fields added to every record. None values are ignored."""

    @classmethod
    def set(cls, **fields: Any) -> None:
        _reject_unknown(fields)
        _context.set(_merged(fields))

    @classmethod
    def get(cls, name: str) -> str | None:
        return _context.get().get(name)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[None]:
        """Set fields for the duration of a ``with`` block, then restore."""
        _reject_unknown(fields)
        token = _context.set(_merged(fields))
        try:
            yield
        finally:
            _context.reset(token)


# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # BudgetEngineError subclasses keep their structured details as attributes
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, context, extra=, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        payload.update(
            (k, v) for k, v in vars(record).items()
            if k not in _RECORD_ATTRS and k not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_to_json)


_ROOT = "budget_kernel"


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``budget_kernel`` namespace."""
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``budget_kernel`` logger.

    Calling it again is a no-op while a structured handler is attached.
    """
    root = logging.getLogger(_ROOT)
    if any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        return
    root.setLevel(level)
    root.propagate = False
    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root.addHandler(h)


def reset_logging() -> None:
    """Detach handlers and restore propagation. For tests."""
    root = logging.getLogger(_ROOT)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.NOTSET)
    root.propagate = True
