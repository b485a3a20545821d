"""
Engine log forwarding.

The engine writes its own diagnostics through a logger callback. This
module installs one that forwards every line to the ``engine`` scope of
the package logger at DEBUG, so engine output follows
``OPENTOK_LOG_LEVEL`` and ``OPENTOK_LOG_FORMAT`` like everything else.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

from ._bindings import from_c_string
from ._logging import scoped_logger
from ._native import LoggerCallback

if TYPE_CHECKING:
    from .engine import Engine

__all__ = ["LogLevel", "enable_engine_log"]

log = scoped_logger("engine")


class LogLevel(IntEnum):
    """Engine verbosity (``otc_log_level``)."""

    DISABLED = 0
    FATAL = 2
    ERROR = 3
    WARN = 4
    INFO = 5
    DEBUG = 6
    MSG = 7
    TRACE = 8
    ALL = 100


def _forward(message: bytes | None) -> None:
    text = from_c_string(message)
    if text:
        log.debug(text.rstrip())


def enable_engine_log(level: LogLevel = LogLevel.WARN, engine: Engine | None = None) -> None:
    """Forward engine log lines at ``level`` and above to Python logging.

    Args:
        level: Engine verbosity.
        engine: Engine to configure; defaults to the default engine.

    Example:
        >>> enable_engine_log(LogLevel.INFO)
    """
    if engine is None:
        from .engine import get_engine

        engine = get_engine()
    if engine._log_callback is None:
        # Referenced by the engine until it is destroyed
        engine._log_callback = LoggerCallback(_forward)
        engine.lib.otc_log_set_logger_callback(engine._log_callback)
    engine.lib.otc_log_enable(int(level))
