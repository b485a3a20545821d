"""
Structured logging (OpenTelemetry-compliant).

Produces structured log output following the OpenTelemetry Logging Data Model.
Lines forwarded from the native engine (see ``opentok_native.log``) go
through the same handler, under the ``engine`` scope.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("session")
    log.info("Connect requested", extra={"session_id": session_id})

Environment::

    OPENTOK_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    OPENTOK_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Any

__all__ = ["logger", "setup_logging", "scoped_logger"]

_DIST_NAME = "opentok-native"
_SERVICE_NAME = "opentok_native"

# =============================================================================
# Version
# =============================================================================


def _get_version() -> str:
    """Get package version from metadata."""
    try:
        return get_version(_DIST_NAME)
    except (ImportError, PackageNotFoundError, AttributeError):
        return "0.0.0"


# =============================================================================
# Level Mapping
# =============================================================================

# Python levels to OpenTelemetry severity text
_LEVEL_TO_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Case-insensitive names accepted by OPENTOK_LOG_LEVEL and setup_logging()
_NAME_TO_LEVEL = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "err": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
    "none": logging.CRITICAL + 10,
}

# Levels that include code location
_CODE_LOCATION_LEVELS = {logging.DEBUG, logging.ERROR, logging.CRITICAL}

# LogRecord attributes that are never copied into "attributes"
_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "scope",
        "message",
    }
)

# Logger-name fragments to scope, first match wins
_SCOPE_HINTS = (
    ("session", "session"),
    ("publisher", "publisher"),
    ("subscriber", "subscriber"),
    ("capturer", "capturer"),
    ("audio", "audio"),
    ("frame", "media"),
    ("dispatch", "dispatch"),
    ("registry", "registry"),
    ("engine", "engine"),
)


def _infer_scope(logger_name: str) -> str:
    """Infer scope from logger name when not explicitly provided."""
    for hint, scope in _SCOPE_HINTS:
        if hint in logger_name:
            return scope
    return logger_name.split(".")[-1] if logger_name else _SERVICE_NAME


def _strip_path_prefix(filepath: str) -> str:
    """Strip the install prefix so locations read ``session/session.py``."""
    prefix = f"{_SERVICE_NAME}/"
    if prefix in filepath:
        return filepath[filepath.index(prefix) + len(prefix) :]
    return filepath


# =============================================================================
# Formatters
# =============================================================================


class JsonFormatter(logging.Formatter):
    """OpenTelemetry-compliant JSON formatter."""

    def __init__(self) -> None:
        super().__init__()
        self._version = _get_version()

    def format(self, record: logging.LogRecord) -> str:
        # RFC3339 with nanosecond padding
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(dt.microsecond * 1000):09d}Z"

        attributes: dict[str, Any] = {
            "scope": getattr(record, "scope", None) or _infer_scope(record.name),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_FIELDS and not key.startswith("_"):
                attributes[key] = value

        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _strip_path_prefix(record.pathname)
            attributes["code.lineno"] = record.lineno

        if record.exc_info:
            attributes["exception.stacktrace"] = self.formatException(record.exc_info)

        log_record = {
            "timestamp": timestamp,
            "severityText": _LEVEL_TO_SEVERITY.get(record.levelno, "INFO"),
            "body": record.getMessage(),
            "attributes": attributes,
            "resource": {
                "service.name": _SERVICE_NAME,
                "service.version": self._version,
            },
        }

        return json.dumps(log_record, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for terminal output."""

    # ANSI color codes
    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _RED = "\x1b[31m"
    _YELLOW = "\x1b[33m"
    _CYAN = "\x1b[36m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str) -> str:
        if not self._use_colors or not color:
            return text
        return f"{color}{text}{self._RESET}"

    def _level_color(self, levelno: int) -> str:
        if levelno <= logging.DEBUG:
            return self._DIM
        if levelno >= logging.ERROR:
            return self._RED
        if levelno >= logging.WARNING:
            return self._YELLOW
        return ""

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        severity = _LEVEL_TO_SEVERITY.get(record.levelno, "INFO")
        scope = getattr(record, "scope", None) or _infer_scope(record.name)

        parts = [
            dt.strftime("%H:%M:%S"),
            " ",
            self._paint(f"{severity:<5} ", self._level_color(record.levelno)),
            self._paint(f"[{scope}] ", self._CYAN),
            record.getMessage(),
        ]

        # Session id is the one attribute worth showing inline
        session_id = getattr(record, "session_id", None)
        if session_id:
            parts.append(f" ({session_id})")

        if record.levelno in _CODE_LOCATION_LEVELS:
            filepath = _strip_path_prefix(record.pathname)
            parts.append(self._paint(f" [{filepath}:{record.lineno}]", self._DIM))

        if record.exc_info:
            parts.append("\n" + self.formatException(record.exc_info))

        return "".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    """Get log level from environment."""
    level_name = os.environ.get("OPENTOK_LOG_LEVEL") or os.environ.get("OPENTOK_LOG", "info")
    return _NAME_TO_LEVEL.get(level_name.lower(), logging.INFO)


def _get_log_format() -> str:
    """Get log format from environment or auto-detect."""
    fmt = os.environ.get("OPENTOK_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler() -> logging.Handler:
    """Create appropriate handler based on format."""
    handler = logging.StreamHandler(sys.stderr)
    if _get_log_format() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


# Single logger for the whole package
logger = logging.getLogger(_SERVICE_NAME)


def _setup_default_handler() -> None:
    """Configure default logging based on environment."""
    # Leave user-configured logging alone
    if logger.handlers:
        return

    logger.addHandler(_create_handler())
    logger.setLevel(_get_log_level())


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
) -> None:
    """
    Configure opentok_native logging.

    Parameters
    ----------
    level : str or int, default "INFO"
        Log level. Can be "DEBUG", "INFO", "WARNING", "ERROR", "FATAL",
        or a logging constant like ``logging.DEBUG``.

    format : str, optional
        Log format. Either "json" or "human". If not specified,
        uses OPENTOK_LOG_FORMAT env var or auto-detects based on TTY.

    Examples
    --------
    JSON output for machine parsing::

        >>> import opentok_native
        >>> opentok_native.setup_logging("INFO", format="json")

    Human-readable output::

        >>> opentok_native.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _NAME_TO_LEVEL.get(level.lower(), logging.INFO)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # Child processes inherit the chosen format
    if format:
        os.environ["OPENTOK_LOG_FORMAT"] = format

    logger.addHandler(_create_handler())
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges extra attributes with scope."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra: dict[str, Any] = dict(self.extra) if self.extra else {}
        if "extra" in kwargs:
            extra.update(kwargs["extra"])
        kwargs["extra"] = extra
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """
    Create a logger adapter with a fixed scope.

    Parameters
    ----------
    scope : str
        The scope name (e.g., "session", "dispatch", "audio").

    Returns
    -------
    logging.LoggerAdapter
        A logger adapter that automatically adds scope to all messages.

    Examples
    --------
    ::

        from opentok_native._logging import scoped_logger
        log = scoped_logger("publisher")
        log.info("Publisher created", extra={"token": 3})
    """
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# Initialize on import
_setup_default_handler()
