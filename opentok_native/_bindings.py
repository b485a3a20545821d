"""
Shared FFI helpers.

Locates and loads the OpenTok shared library, configures its signatures
(see ``_native.py``), and provides the status check and pointer helpers
used by every wrapper module.

Library lookup order::

    OPENTOK_LIB_PATH=/opt/opentok/lib/libopentok.so   (exact file)
    OPENTOK_LIB_DIR=/opt/opentok/lib                   (directory)
    ctypes.util.find_library("opentok")                (system paths)
"""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import sys
import threading
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from ._native import setup_signatures
from .exceptions import InitializationError, error_for_status

__all__ = [
    "get_lib",
    "load_library",
    "check",
    "to_c_string",
    "from_c_string",
]

log = scoped_logger("engine")

_lib: ctypes.CDLL | None = None
_lib_lock = threading.Lock()


def _library_filename() -> str:
    """Platform file name of the SDK library."""
    if sys.platform == "win32":
        return "opentok.dll"
    if sys.platform == "darwin":
        return "libopentok.dylib"
    return "libopentok.so"


def _candidate_paths() -> list[str]:
    """Library locations to try, in priority order."""
    candidates = []
    explicit = os.environ.get("OPENTOK_LIB_PATH")
    if explicit:
        candidates.append(explicit)
    lib_dir = os.environ.get("OPENTOK_LIB_DIR")
    if lib_dir:
        candidates.append(str(Path(lib_dir) / _library_filename()))
    found = ctypes.util.find_library("opentok")
    if found:
        candidates.append(found)
    return candidates


def load_library(path: str | os.PathLike[str]) -> ctypes.CDLL:
    """Load the SDK from ``path`` and configure its signatures.

    Raises:
        InitializationError: If the library cannot be loaded.
    """
    try:
        lib = ctypes.CDLL(str(path))
    except OSError as e:
        raise InitializationError(
            f"Cannot load OpenTok library: {e}",
            details={"path": str(path)},
        ) from e

    missing = setup_signatures(lib)
    if missing:
        log.warning(
            "OpenTok library is missing %d bound functions",
            len(missing),
            extra={"path": str(path), "missing": missing},
        )
    log.debug("Loaded OpenTok library", extra={"path": str(path)})
    return lib


def get_lib() -> ctypes.CDLL:
    """Return the process-wide SDK library, loading it on first use.

    Raises:
        InitializationError: If no candidate location yields a loadable library.
    """
    global _lib
    with _lib_lock:
        if _lib is not None:
            return _lib

        candidates = _candidate_paths()
        errors: dict[str, str] = {}
        for candidate in candidates:
            try:
                _lib = load_library(candidate)
            except InitializationError as e:
                errors[candidate] = str(e)
                continue
            return _lib

        raise InitializationError(
            "OpenTok library not found. Set OPENTOK_LIB_DIR or OPENTOK_LIB_PATH.",
            details={"searched": candidates, "errors": errors},
        )


# =============================================================================
# Status / String Helpers
# =============================================================================


def check(status: int, details: dict[str, Any] | None = None) -> None:
    """Raise the mapped exception if ``status`` is not OTC_SUCCESS."""
    error = error_for_status(status, details)
    if error is not None:
        raise error


def to_c_string(value: str | bytes | None) -> bytes | None:
    """Encode a Python string for a ``const char*`` argument."""
    if value is None or isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def from_c_string(value: bytes | None) -> str | None:
    """Decode an engine-owned ``const char*`` into an owned str."""
    if value is None:
        return None
    return value.decode("utf-8", errors="replace")
