"""Subscribers, their statistics and error codes."""

from .subscriber import Subscriber
from .types import (
    SubscriberAudioStats,
    SubscriberErrorCode,
    SubscriberListeners,
    SubscriberVideoStats,
    VideoReason,
)

__all__ = [
    "Subscriber",
    "SubscriberAudioStats",
    "SubscriberErrorCode",
    "SubscriberListeners",
    "SubscriberVideoStats",
    "VideoReason",
]
