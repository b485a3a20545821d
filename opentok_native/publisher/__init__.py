"""Publishers, their statistics and error codes."""

from .publisher import Publisher
from .types import (
    PublisherAudioStats,
    PublisherErrorCode,
    PublisherListeners,
    PublisherVideoStats,
)

__all__ = [
    "Publisher",
    "PublisherAudioStats",
    "PublisherErrorCode",
    "PublisherListeners",
    "PublisherVideoStats",
]
