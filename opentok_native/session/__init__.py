"""Sessions and their events."""

from .session import Session
from .types import SessionErrorCode, SessionListeners, SessionState

__all__ = [
    "Session",
    "SessionErrorCode",
    "SessionListeners",
    "SessionState",
]
