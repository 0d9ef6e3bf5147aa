"""Centralized logging helpers.

Provides a single ``configure_logging`` entry point plus small helpers used by
the planner modules to emit structured DEBUG records without paying the cost
of building them when DEBUG is off.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONTEXT_KEYS = ("event", "component", "action", "outcome", "duration_ms")


class _ContextFormatter(logging.Formatter):
    """Formatter appending structured context fields at DEBUG level."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = getattr(record, "context_fields", None)
        if not context or record.levelno > logging.DEBUG:
            return base
        parts = [f"{key}={value}" for key, value in sorted(context.items())]
        return f"{base} [{' '.join(parts)}]"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once for CLI usage.

    Level precedence: explicit argument, then the ``SOLCPLAN_LOG_LEVEL``
    environment variable, then INFO.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(_ContextFormatter(Constants.LOG_FORMAT))
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            _ContextFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        root.addHandler(file_handler)

    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when the given logger would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a structured log call.

    Unknown keys are kept; ``None`` values are dropped.
    """
    context = {k: v for k, v in fields.items() if v is not None}
    ordered = {k: context.pop(k) for k in _CONTEXT_KEYS if k in context}
    ordered.update(context)
    return {"context_fields": ordered}


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
