"""
opentok_native exceptions.

This module defines the synchronous error taxonomy for opentok_native:

    OpenTokError (base)
    ├── InvalidParamError - Engine rejected a parameter
    ├── FatalError - Engine reported an unrecoverable failure
    ├── ConnectionDroppedError - Connection to the server dropped
    ├── TimedOutError - Request timed out
    ├── UnknownPublisherInstanceError - Engine does not know the publisher
    ├── UnknownSubscriberInstanceError - Engine does not know the subscriber
    ├── VideoCaptureFailedError - Video capture failed
    ├── CameraFailedError - Camera could not be used
    ├── VideoRenderFailedError - Video render failed
    ├── MediaEngineInaccessibleError - Media engine could not be reached
    ├── NullHandleError - Null native handle where one is required
    ├── AlreadyInitializedError - Set-once state was already set
    ├── InitializationError - Engine or library failed to initialize
    ├── OverrideNotAllowedError - Audio device callbacks already installed
    │   ├── RenderCallbacksOverrideNotAllowedError
    │   └── CaptureCallbacksOverrideNotAllowedError
    └── UnknownError - Status code with no known meaning

Every class carries a ``kind`` (:class:`ErrorKind`) so callers can branch on
the taxonomy without matching class names.

Asynchronous engine errors (session, publisher, subscriber) are not raised.
They reach ``on_error`` listeners as typed codes, see
``opentok_native.session.SessionErrorCode`` and friends.

Usage:
    try:
        session.connect(token)
    except opentok_native.TimedOutError:
        retry_later()
    except opentok_native.OpenTokError as e:
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")
"""

from enum import Enum
from typing import Any

__all__ = [
    "ErrorKind",
    # Base
    "OpenTokError",
    # Engine status codes
    "InvalidParamError",
    "FatalError",
    "ConnectionDroppedError",
    "TimedOutError",
    "UnknownPublisherInstanceError",
    "UnknownSubscriberInstanceError",
    "VideoCaptureFailedError",
    "CameraFailedError",
    "VideoRenderFailedError",
    "MediaEngineInaccessibleError",
    # Host state
    "NullHandleError",
    "AlreadyInitializedError",
    "InitializationError",
    "OverrideNotAllowedError",
    "RenderCallbacksOverrideNotAllowedError",
    "CaptureCallbacksOverrideNotAllowedError",
    "UnknownError",
]


class ErrorKind(Enum):
    """Closed set of synchronous error kinds."""

    INVALID_PARAM = "INVALID_PARAM"
    FATAL = "FATAL"
    CONNECTION_DROPPED = "CONNECTION_DROPPED"
    TIMED_OUT = "TIMED_OUT"
    UNKNOWN_PUBLISHER_INSTANCE = "UNKNOWN_PUBLISHER_INSTANCE"
    UNKNOWN_SUBSCRIBER_INSTANCE = "UNKNOWN_SUBSCRIBER_INSTANCE"
    VIDEO_CAPTURE_FAILED = "VIDEO_CAPTURE_FAILED"
    CAMERA_FAILED = "CAMERA_FAILED"
    VIDEO_RENDER_FAILED = "VIDEO_RENDER_FAILED"
    MEDIA_ENGINE_INACCESSIBLE = "MEDIA_ENGINE_INACCESSIBLE"
    NULL_HANDLE = "NULL_HANDLE"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    INITIALIZATION = "INITIALIZATION"
    RENDER_CALLBACKS_OVERRIDE_NOT_ALLOWED = "RENDER_CALLBACKS_OVERRIDE_NOT_ALLOWED"
    CAPTURE_CALLBACKS_OVERRIDE_NOT_ALLOWED = "CAPTURE_CALLBACKS_OVERRIDE_NOT_ALLOWED"
    UNKNOWN = "UNKNOWN"


class OpenTokError(Exception):
    """
    Base exception for all opentok_native errors.

    All package exceptions inherit from this class, enabling:
    - Catch-all handling: ``except opentok_native.OpenTokError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "NULL_HANDLE").
    details : dict[str, Any]
        Structured context (e.g., {"operation": "otc_session_connect"}).
    original_code : int | None
        The engine's integer status code, when the error came from one.

    Example
    -------
    >>> try:
    ...     subscriber.set_preferred_framerate(15.0)
    ... except opentok_native.OpenTokError as e:
    ...     print(f"Error code: {e.code}")
    Error code: NULL_HANDLE
    """

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code or self.kind.value
        self.details = details or {}
        self.original_code = original_code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Engine Status Errors
# =============================================================================


class InvalidParamError(OpenTokError, ValueError):
    """An argument was rejected by the engine (OTC_INVALID_PARAM)."""

    kind = ErrorKind.INVALID_PARAM

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 1)


class FatalError(OpenTokError, RuntimeError):
    """
    Unrecoverable engine failure (OTC_FATAL).

    The engine refused the request outright. The owning object remains
    usable, but the request should not be retried unchanged.
    """

    kind = ErrorKind.FATAL

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 2)


class ConnectionDroppedError(OpenTokError, ConnectionError):
    """The connection to the OpenTok server was dropped."""

    kind = ErrorKind.CONNECTION_DROPPED

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 1022)


class TimedOutError(OpenTokError, TimeoutError):
    """The engine timed out while servicing the request."""

    kind = ErrorKind.TIMED_OUT

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 1542)


class UnknownPublisherInstanceError(OpenTokError, RuntimeError):
    """The engine has no record of the publisher passed in."""

    kind = ErrorKind.UNKNOWN_PUBLISHER_INSTANCE

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 2003)


class UnknownSubscriberInstanceError(OpenTokError, RuntimeError):
    """The engine has no record of the subscriber passed in."""

    kind = ErrorKind.UNKNOWN_SUBSCRIBER_INSTANCE

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 2004)


# =============================================================================
# Media Errors
# =============================================================================


class VideoCaptureFailedError(OpenTokError, RuntimeError):
    """Video capture failed."""

    kind = ErrorKind.VIDEO_CAPTURE_FAILED

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 3000)


class CameraFailedError(OpenTokError, RuntimeError):
    """The camera could not be opened or stopped delivering frames."""

    kind = ErrorKind.CAMERA_FAILED

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 3010)


class VideoRenderFailedError(OpenTokError, RuntimeError):
    """Video render failed."""

    kind = ErrorKind.VIDEO_RENDER_FAILED

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 4000)


class MediaEngineInaccessibleError(OpenTokError, RuntimeError):
    """The engine could not access its media engine."""

    kind = ErrorKind.MEDIA_ENGINE_INACCESSIBLE

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 5000)


# =============================================================================
# Host State Errors
# =============================================================================


class NullHandleError(OpenTokError, RuntimeError):
    """
    A native handle was required but is null.

    Raised when:
    - A create call returned a null pointer
    - A method runs before the handle exists (e.g., a Subscriber before
      ``set_stream``, a VideoCapturer before the engine's init event)
    - A method runs after the handle was deleted

    The object that raised it remains otherwise usable.
    """

    kind = ErrorKind.NULL_HANDLE

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        if message is None:
            message = "Native handle is null"
        super().__init__(message, code, details, original_code)


class AlreadyInitializedError(OpenTokError, RuntimeError):
    """A set-once value (engine, subscriber stream) was already set."""

    kind = ErrorKind.ALREADY_INITIALIZED

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


class InitializationError(OpenTokError, RuntimeError):
    """
    The engine or its shared library failed to initialize.

    Raised when the shared library cannot be located or loaded, when
    ``otc_init`` fails, or when an object needs the default engine before
    ``opentok_native.init()`` was called.
    """

    kind = ErrorKind.INITIALIZATION

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


class OverrideNotAllowedError(OpenTokError, RuntimeError):
    """Audio device listeners for this role were already installed."""

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        if message is None:
            message = f"{self.kind.value.replace('_', ' ').capitalize()}"
        super().__init__(message, code, details, original_code)


class RenderCallbacksOverrideNotAllowedError(OverrideNotAllowedError):
    """Render listeners can only be set once per audio device."""

    kind = ErrorKind.RENDER_CALLBACKS_OVERRIDE_NOT_ALLOWED


class CaptureCallbacksOverrideNotAllowedError(OverrideNotAllowedError):
    """Capture listeners can only be set once per audio device."""

    kind = ErrorKind.CAPTURE_CALLBACKS_OVERRIDE_NOT_ALLOWED


class UnknownError(OpenTokError, RuntimeError):
    """The engine returned a status code with no known meaning."""

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)
