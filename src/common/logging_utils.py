"""Logging helpers: root configuration, structured extras and timing.

Modules log through ``logging.getLogger(__name__)``; this module only wires
handlers and offers the small helpers used for DEBUG traces.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_VERBOSITY_LEVELS = {
    -2: logging.ERROR,
    -1: logging.WARNING,
    0: logging.INFO,
    1: logging.DEBUG,
}


def level_for_verbosity(verbosity: int) -> int:
    """Map a ``-v``/``-q`` balance to a logging level."""
    clamped = max(-2, min(1, verbosity))
    return _VERBOSITY_LEVELS[clamped]


def configure_logging(
    level: Optional[str] = None,
    *,
    verbosity: int = 0,
    log_file: Optional[str] = None,
) -> None:
    """Configure the root logger once per process.

    Precedence for the level: explicit ``level`` argument, then the
    ``CARGO_LINER_LOG_LEVEL`` environment variable, then ``verbosity``.
    Output goes to stderr so that stdout stays free for exports.
    """
    env_level = os.environ.get(Constants.ENV_LOG_LEVEL)
    level_name = (level or env_level or "").strip().upper()
    level_value = getattr(logging, level_name, None) if level_name else None
    if not isinstance(level_value, int):
        level_value = level_for_verbosity(verbosity)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level_value)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        root.addHandler(file_handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records of ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping, dropping unset fields."""
    return {key: value for key, value in fields.items() if value is not None}


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, up to now if still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
