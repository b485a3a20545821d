"""
opentok_native exceptions.

This module defines the exception hierarchy for opentok_native:

    OpenTokError (base)
    ├── InvalidParamError - Engine rejected a parameter
    ├── FatalError - Unrecoverable engine failure
    ├── ConnectionDroppedError - Connection to the server dropped
    ├── TimedOutError - Request timed out
    ├── UnknownPublisherInstanceError / UnknownSubscriberInstanceError
    ├── VideoCaptureFailedError / CameraFailedError / VideoRenderFailedError
    ├── MediaEngineInaccessibleError - Media engine unreachable
    ├── NullHandleError - Null native handle
    ├── AlreadyInitializedError - Set-once value already set
    ├── InitializationError - Library or engine failed to initialize
    ├── OverrideNotAllowedError - Audio device listeners already installed
    │   ├── RenderCallbacksOverrideNotAllowedError
    │   └── CaptureCallbacksOverrideNotAllowedError
    └── UnknownError - Unrecognized status code
"""

from .exceptions import (
    AlreadyInitializedError,
    CameraFailedError,
    CaptureCallbacksOverrideNotAllowedError,
    ConnectionDroppedError,
    ErrorKind,
    FatalError,
    InitializationError,
    InvalidParamError,
    MediaEngineInaccessibleError,
    NullHandleError,
    OpenTokError,
    OverrideNotAllowedError,
    RenderCallbacksOverrideNotAllowedError,
    TimedOutError,
    UnknownError,
    UnknownPublisherInstanceError,
    UnknownSubscriberInstanceError,
    VideoCaptureFailedError,
    VideoRenderFailedError,
)
from .status import STATUS_SUCCESS, error_for_status

# =============================================================================
# Public API - See opentok_native/__init__.py for documentation mapping
# =============================================================================
__all__ = [
    # Base
    "OpenTokError",
    "ErrorKind",
    # Engine status codes
    "InvalidParamError",
    "FatalError",
    "ConnectionDroppedError",
    "TimedOutError",
    "UnknownPublisherInstanceError",
    "UnknownSubscriberInstanceError",
    # Media
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
    # Status translation
    "STATUS_SUCCESS",
    "error_for_status",
]
