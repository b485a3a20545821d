"""
Type definitions for sessions.

Listener set, connection state, and the asynchronous error codes the
engine reports through ``on_error``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..types import Connection, Stream, StreamVideoType
    from .session import Session

__all__ = [
    "SessionListeners",
    "SessionState",
    "SessionErrorCode",
]


# =============================================================================
# State
# =============================================================================


class SessionState(Enum):
    """Connection state as last reported by the engine."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


# =============================================================================
# Asynchronous Errors
# =============================================================================


class SessionErrorCode(IntEnum):
    """Session error codes (``otc_session_error_code``)."""

    AUTHORIZATION_FAILURE = 1004
    INVALID_SESSION = 1005
    CONNECTION_FAILED = 1006
    NOT_CONNECTED = 1010
    NULL_OR_INVALID_PARAMETER = 1011
    ILLEGAL_STATE = 1015
    STATE_FAILED = 1020
    CONNECTION_TIMED_OUT = 1021
    CONNECTION_DROPPED = 1022
    CONNECTION_REFUSED = 1023
    BLOCKED_COUNTRY = 1026
    CONNECTION_LIMIT_EXCEEDED = 1027
    SUBSCRIBER_NOT_FOUND = 1112
    PUBLISHER_NOT_FOUND = 1113
    SIGNAL_DATA_TOO_LONG = 1413
    SIGNAL_TYPE_TOO_LONG = 1414
    INVALID_SIGNAL_TYPE = 1461
    NO_MESSAGING_SERVER = 1503
    FORCE_UNPUBLISH_OR_INVALID_STREAM = 1535
    INTERNAL_ERROR = 2000
    UNEXPECTED_GET_SESSION_INFO_RESPONSE = 2001
    UNKNOWN = -1

    @classmethod
    def from_native(cls, value: int) -> SessionErrorCode:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# =============================================================================
# Listeners
# =============================================================================


@dataclass(frozen=True)
class SessionListeners:
    """
    Handlers for session events. Every field is optional.

    Each handler receives the :class:`Session` first, then the event
    arguments. Handlers run on an engine thread.

    Attributes
    ----------
    on_connected(session)
        The session connected.
    on_disconnected(session)
        The session disconnected.
    on_connection_created(session, connection)
        Another client connected.
    on_connection_dropped(session, connection)
        Another client left.
    on_stream_received(session, stream)
        A stream was published by another client.
    on_stream_dropped(session, stream)
        A stream stopped.
    on_stream_has_audio_changed(session, stream, has_audio)
    on_stream_has_video_changed(session, stream, has_video)
    on_stream_video_dimensions_changed(session, stream, width, height)
    on_stream_video_type_changed(session, stream, video_type)
    on_signal_received(session, type, data, connection)
        A signal arrived; ``connection`` is the sender, if known.
    on_reconnection_started(session)
    on_reconnected(session)
    on_archive_started(session, archive_id, name)
    on_archive_stopped(session, archive_id)
    on_error(session, message, code)
        Asynchronous failure; ``code`` is a :class:`SessionErrorCode`.

    Example:
        >>> listeners = SessionListeners(
        ...     on_connected=lambda session: print("connected"),
        ...     on_stream_received=lambda session, stream: print(stream.id),
        ... )
    """

    on_connected: Callable[[Session], None] | None = None
    on_disconnected: Callable[[Session], None] | None = None
    on_connection_created: Callable[[Session, Connection], None] | None = None
    on_connection_dropped: Callable[[Session, Connection], None] | None = None
    on_stream_received: Callable[[Session, Stream], None] | None = None
    on_stream_dropped: Callable[[Session, Stream], None] | None = None
    on_stream_has_audio_changed: Callable[[Session, Stream, bool], None] | None = None
    on_stream_has_video_changed: Callable[[Session, Stream, bool], None] | None = None
    on_stream_video_dimensions_changed: Callable[[Session, Stream, int, int], None] | None = None
    on_stream_video_type_changed: (
        Callable[[Session, Stream, StreamVideoType | None], None] | None
    ) = None
    on_signal_received: (
        Callable[[Session, str | None, str | None, Connection | None], None] | None
    ) = None
    on_reconnection_started: Callable[[Session], None] | None = None
    on_reconnected: Callable[[Session], None] | None = None
    on_archive_started: Callable[[Session, str, str | None], None] | None = None
    on_archive_stopped: Callable[[Session, str], None] | None = None
    on_error: Callable[[Session, str, SessionErrorCode], None] | None = None
