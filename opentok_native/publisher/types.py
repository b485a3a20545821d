"""
Type definitions for publishers.

Listener set, statistics records, and asynchronous error codes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from .._bindings import from_c_string

if TYPE_CHECKING:
    from ..media.video_frame import VideoFrame
    from ..types import Stream
    from .publisher import Publisher

__all__ = [
    "PublisherListeners",
    "PublisherErrorCode",
    "PublisherAudioStats",
    "PublisherVideoStats",
]


class PublisherErrorCode(IntEnum):
    """Publisher error codes (``otc_publisher_error_code``)."""

    SESSION_DISCONNECTED = 1010
    UNABLE_TO_PUBLISH = 1500
    TIMED_OUT = 1541
    WEBRTC_ERROR = 1610
    INTERNAL_ERROR = 2000
    UNKNOWN = -1

    @classmethod
    def from_native(cls, value: int) -> PublisherErrorCode:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# =============================================================================
# Statistics
# =============================================================================


@dataclass(frozen=True)
class PublisherAudioStats:
    """
    Audio statistics for one subscriber of the published stream.

    Attributes
    ----------
        connection_id: Connection of the subscribing client.
        subscriber_id: Subscriber identifier on that client.
        packets_lost: Packets that did not reach the subscriber.
        packets_sent: Packets sent.
        bytes_sent: Bytes sent.
        audio_level: Level from 0.0 to 1.0.
        timestamp: Milliseconds since the Unix epoch.
        start_time: Start of the cumulative counters, same clock.
    """

    connection_id: str | None
    subscriber_id: str | None
    packets_lost: int
    packets_sent: int
    bytes_sent: int
    audio_level: float
    timestamp: float
    start_time: float

    @classmethod
    def from_c(cls, raw: Any) -> PublisherAudioStats:
        return cls(
            connection_id=from_c_string(raw.connection_id),
            subscriber_id=from_c_string(raw.subscriber_id),
            packets_lost=raw.packets_lost,
            packets_sent=raw.packets_sent,
            bytes_sent=raw.bytes_sent,
            audio_level=raw.audio_level,
            timestamp=raw.timestamp,
            start_time=raw.start_time,
        )


@dataclass(frozen=True)
class PublisherVideoStats:
    """Video statistics for one subscriber. Same fields as audio, minus level."""

    connection_id: str | None
    subscriber_id: str | None
    packets_lost: int
    packets_sent: int
    bytes_sent: int
    timestamp: float
    start_time: float

    @classmethod
    def from_c(cls, raw: Any) -> PublisherVideoStats:
        return cls(
            connection_id=from_c_string(raw.connection_id),
            subscriber_id=from_c_string(raw.subscriber_id),
            packets_lost=raw.packets_lost,
            packets_sent=raw.packets_sent,
            bytes_sent=raw.bytes_sent,
            timestamp=raw.timestamp,
            start_time=raw.start_time,
        )


# =============================================================================
# Listeners
# =============================================================================


@dataclass(frozen=True)
class PublisherListeners:
    """
    Handlers for publisher events. Every field is optional.

    Each handler receives the :class:`Publisher` first.

    Attributes
    ----------
    on_stream_created(publisher, stream)
        The published stream exists; :attr:`Publisher.stream` is now set.
    on_stream_destroyed(publisher, stream)
    on_render_frame(publisher, frame)
        Local preview frame (a :class:`VideoFrame` copy).
    on_audio_level_updated(publisher, level)
    on_audio_stats(publisher, stats)
        List of :class:`PublisherAudioStats`, one per subscriber.
    on_video_stats(publisher, stats)
        List of :class:`PublisherVideoStats`.
    on_error(publisher, message, code)
        ``code`` is a :class:`PublisherErrorCode`.
    """

    on_stream_created: Callable[[Publisher, Stream], None] | None = None
    on_stream_destroyed: Callable[[Publisher, Stream], None] | None = None
    on_render_frame: Callable[[Publisher, VideoFrame], None] | None = None
    on_audio_level_updated: Callable[[Publisher, float], None] | None = None
    on_audio_stats: Callable[[Publisher, list[PublisherAudioStats]], None] | None = None
    on_video_stats: Callable[[Publisher, list[PublisherVideoStats]], None] | None = None
    on_error: Callable[[Publisher, str, PublisherErrorCode], None] | None = None
