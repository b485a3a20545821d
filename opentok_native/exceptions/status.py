"""Translation of engine status codes (``otc_status``) to exceptions."""

from typing import Any

from .exceptions import (
    CameraFailedError,
    ConnectionDroppedError,
    FatalError,
    InvalidParamError,
    MediaEngineInaccessibleError,
    OpenTokError,
    TimedOutError,
    UnknownError,
    UnknownPublisherInstanceError,
    UnknownSubscriberInstanceError,
    VideoCaptureFailedError,
    VideoRenderFailedError,
)

STATUS_SUCCESS = 0

# otc_error_code values from opentok/base.h
_STATUS_TO_ERROR: dict[int, tuple[type[OpenTokError], str]] = {
    1: (InvalidParamError, "Invalid parameter"),
    2: (FatalError, "Fatal engine error"),
    1022: (ConnectionDroppedError, "Connection dropped"),
    1542: (TimedOutError, "Connection timed out"),
    2003: (UnknownPublisherInstanceError, "Unknown publisher instance"),
    2004: (UnknownSubscriberInstanceError, "Unknown subscriber instance"),
    3000: (VideoCaptureFailedError, "Video capture failed"),
    3010: (CameraFailedError, "Camera failed"),
    4000: (VideoRenderFailedError, "Video render failed"),
    5000: (MediaEngineInaccessibleError, "Unable to access media engine"),
}


def error_for_status(status: int, details: dict[str, Any] | None = None) -> OpenTokError | None:
    """Map an engine status to an exception instance.

    Args:
        status: Value returned by an ``otc_*`` call.
        details: Context attached to the exception.

    Returns:
        None on ``OTC_SUCCESS``, otherwise the exception for the code.
        Codes outside the known table map to :class:`UnknownError`.
    """
    if status == STATUS_SUCCESS:
        return None
    cls, message = _STATUS_TO_ERROR.get(status, (UnknownError, "Unknown engine error"))
    operation = (details or {}).get("operation")
    if operation:
        message = f"{operation} failed: {message} ({status})"
    else:
        message = f"{message} ({status})"
    return cls(message, details=details, original_code=status)
