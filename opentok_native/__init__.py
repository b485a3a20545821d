"""
opentok_native - Python binding for the OpenTok native SDK.

The SDK is a callback-driven C library: opaque pointers, raw function
pointers, and integer status codes. This package wraps it so applications
work with sessions, publishers, and subscribers, receive their events as
plain Python calls, and never touch a pointer the engine may already have
released.

Quick Start
-----------

    >>> import opentok_native as ot
    >>>
    >>> ot.init()
    >>> publisher = ot.Publisher("camera")
    >>>
    >>> def on_stream_received(session, stream):
    ...     subscriber = ot.Subscriber(ot.SubscriberListeners(
    ...         on_render_frame=lambda sub, frame: show(frame.to_numpy()),
    ...     ))
    ...     subscriber.set_stream(stream)
    ...     session.subscribe(subscriber)
    >>>
    >>> session = ot.Session(api_key, session_id, ot.SessionListeners(
    ...     on_connected=lambda s: s.publish(publisher),
    ...     on_stream_received=on_stream_received,
    ... ))
    >>> session.connect(token)
    >>> ...
    >>> ot.deinit()

Requests such as ``connect`` or ``toggle_audio`` return as soon as the
engine accepts them; outcomes arrive through listeners, on engine threads.


Custom Media
------------

Push video from your own source:

    >>> capturer = ot.VideoCapturer(
    ...     ot.VideoCapturerSettings(width=640, height=480, fps=15),
    ...     frame_source=lambda: camera.read_rgba(),
    ... )
    >>> publisher = ot.Publisher("custom", capturer=capturer)

Exchange audio with the engine's audio device:

    >>> device = ot.AudioDevice.get_instance()
    >>> device.set_on_audio_sample_callback(lambda sample: play(sample.data))
    >>> device.push_audio_sample(microphone_chunk)


Configuration
-------------

- ``OPENTOK_LIB_PATH`` / ``OPENTOK_LIB_DIR``: where to find ``libopentok``
- ``OPENTOK_LOG_LEVEL``: trace, debug, info (default), warn, error, off
- ``OPENTOK_LOG_FORMAT``: json or human

Engine diagnostics are off until :func:`enable_engine_log` is called.
"""

from opentok_native._version import __version__ as __version__
from opentok_native._logging import setup_logging

# Engine
from opentok_native.engine import Engine, deinit, get_engine, init

# Exceptions (all via opentok_native.exceptions)
from opentok_native.exceptions import (
    ErrorKind,
    NullHandleError,
    OpenTokError,
)
from opentok_native.log import LogLevel, enable_engine_log

# Media
from opentok_native.media import (
    AudioCaptureListeners,
    AudioDevice,
    AudioDeviceSettings,
    AudioRenderListeners,
    AudioSample,
    FrameFormat,
    VideoCapturer,
    VideoCapturerListeners,
    VideoCapturerSettings,
    VideoFrame,
)

# Publisher
from opentok_native.publisher import Publisher, PublisherListeners

# Session
from opentok_native.session import Session, SessionListeners, SessionState

# Subscriber
from opentok_native.subscriber import Subscriber, SubscriberListeners

# Entities
from opentok_native.types import Connection, Stream, StreamVideoType

__all__ = [
    # Engine
    "init",
    "deinit",
    "get_engine",
    "Engine",
    "LogLevel",
    "enable_engine_log",
    "setup_logging",
    # Session
    "Session",
    "SessionListeners",
    "SessionState",
    # Publisher
    "Publisher",
    "PublisherListeners",
    # Subscriber
    "Subscriber",
    "SubscriberListeners",
    # Entities
    "Connection",
    "Stream",
    "StreamVideoType",
    # Media
    "VideoFrame",
    "FrameFormat",
    "VideoCapturer",
    "VideoCapturerSettings",
    "VideoCapturerListeners",
    "AudioDevice",
    "AudioDeviceSettings",
    "AudioSample",
    "AudioRenderListeners",
    "AudioCaptureListeners",
    # Exceptions
    "OpenTokError",
    "ErrorKind",
    "NullHandleError",
]
