"""
Type definitions for subscribers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..media.video_frame import VideoFrame
    from ..types import Stream
    from .subscriber import Subscriber

__all__ = [
    "SubscriberListeners",
    "SubscriberErrorCode",
    "SubscriberAudioStats",
    "SubscriberVideoStats",
    "VideoReason",
]


class SubscriberErrorCode(IntEnum):
    """Subscriber error codes (``otc_subscriber_error_code``)."""

    SESSION_DISCONNECTED = 1010
    TIMED_OUT = 1542
    WEBRTC_ERROR = 1600
    SERVER_CANNOT_FIND_STREAM = 1604
    STREAM_LIMIT_EXCEEDED = 1605
    INTERNAL_ERROR = 2000
    UNKNOWN = -1

    @classmethod
    def from_native(cls, value: int) -> SubscriberErrorCode:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class VideoReason(IntEnum):
    """Why subscribed video was enabled or disabled."""

    PUBLISH_VIDEO = 1
    SUBSCRIBE_TO_VIDEO = 2
    QUALITY = 3
    CODEC_NOT_SUPPORTED = 4
    UNKNOWN = -1

    @classmethod
    def from_native(cls, value: int) -> VideoReason:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class SubscriberAudioStats:
    """
    Received audio statistics.

    Attributes
    ----------
        packets_lost: Packets lost in transit.
        packets_received: Packets received.
        bytes_received: Bytes received.
        audio_level: Level from 0.0 to 1.0.
        timestamp: Milliseconds since the Unix epoch.
    """

    packets_lost: int
    packets_received: int
    bytes_received: int
    audio_level: float
    timestamp: float

    @classmethod
    def from_c(cls, raw: Any) -> SubscriberAudioStats:
        return cls(
            packets_lost=raw.packets_lost,
            packets_received=raw.packets_received,
            bytes_received=raw.bytes_received,
            audio_level=raw.audio_level,
            timestamp=raw.timestamp,
        )


@dataclass(frozen=True)
class SubscriberVideoStats:
    """Received video statistics."""

    packets_lost: int
    packets_received: int
    bytes_received: int
    timestamp: float

    @classmethod
    def from_c(cls, raw: Any) -> SubscriberVideoStats:
        return cls(
            packets_lost=raw.packets_lost,
            packets_received=raw.packets_received,
            bytes_received=raw.bytes_received,
            timestamp=raw.timestamp,
        )


@dataclass(frozen=True)
class SubscriberListeners:
    """
    Handlers for subscriber events. Every field is optional.

    Each handler receives the :class:`Subscriber` first.

    Attributes
    ----------
    on_connected(subscriber, stream)
    on_disconnected(subscriber)
    on_reconnected(subscriber)
    on_render_frame(subscriber, frame)
    on_video_disabled(subscriber, reason)
    on_video_enabled(subscriber, reason)
    on_audio_disabled(subscriber)
    on_audio_enabled(subscriber)
    on_video_data_received(subscriber)
    on_video_disable_warning(subscriber)
    on_video_disable_warning_lifted(subscriber)
    on_audio_stats(subscriber, stats)
    on_video_stats(subscriber, stats)
    on_audio_level_updated(subscriber, level)
    on_error(subscriber, message, code)
        ``code`` is a :class:`SubscriberErrorCode`.
    """

    on_connected: Callable[[Subscriber, Stream], None] | None = None
    on_disconnected: Callable[[Subscriber], None] | None = None
    on_reconnected: Callable[[Subscriber], None] | None = None
    on_render_frame: Callable[[Subscriber, VideoFrame], None] | None = None
    on_video_disabled: Callable[[Subscriber, VideoReason], None] | None = None
    on_video_enabled: Callable[[Subscriber, VideoReason], None] | None = None
    on_audio_disabled: Callable[[Subscriber], None] | None = None
    on_audio_enabled: Callable[[Subscriber], None] | None = None
    on_video_data_received: Callable[[Subscriber], None] | None = None
    on_video_disable_warning: Callable[[Subscriber], None] | None = None
    on_video_disable_warning_lifted: Callable[[Subscriber], None] | None = None
    on_audio_stats: Callable[[Subscriber, SubscriberAudioStats], None] | None = None
    on_video_stats: Callable[[Subscriber, SubscriberVideoStats], None] | None = None
    on_audio_level_updated: Callable[[Subscriber, float], None] | None = None
    on_error: Callable[[Subscriber, str, SubscriberErrorCode], None] | None = None
