"""
Value entities copied out of engine callbacks.

Both are snapshots: fields are read once, from an owned copy of the
borrowed pointer, and never change afterwards.
"""

from .connection import Connection
from .stream import Stream, StreamVideoType

__all__ = [
    "Connection",
    "Stream",
    "StreamVideoType",
]
