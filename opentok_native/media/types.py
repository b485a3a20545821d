"""
Type definitions for custom media sources and sinks.
"""

from __future__ import annotations

from array import array
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .video_frame import FrameFormat

if TYPE_CHECKING:
    from .audio_device import AudioDevice
    from .video_capturer import VideoCapturer

__all__ = [
    "VideoCapturerSettings",
    "VideoCapturerListeners",
    "AudioDeviceSettings",
    "AudioSample",
    "AudioRenderListeners",
    "AudioCaptureListeners",
]


# =============================================================================
# Video Capturer
# =============================================================================


@dataclass(frozen=True)
class VideoCapturerSettings:
    """
    What a custom video capturer produces. Read by the engine on demand.

    Attributes
    ----------
        format: Pixel format of provided frames.
        width: Frame width in pixels.
        height: Frame height in pixels.
        fps: Frames per second; also the cadence of a frame-source loop.
        expected_delay: Estimated capture delay in milliseconds.
        mirror_on_local_render: Mirror the local preview.
    """

    format: FrameFormat = FrameFormat.RGBA32
    width: int = 1280
    height: int = 720
    fps: int = 30
    expected_delay: int = 0
    mirror_on_local_render: bool = False

    @property
    def frame_interval(self) -> float:
        """Seconds between frames."""
        return 1.0 / self.fps if self.fps > 0 else 1.0 / 30

    def write_to(self, raw: Any) -> None:
        """Fill an ``otc_video_capturer_settings`` struct."""
        raw.format = int(self.format)
        raw.width = self.width
        raw.height = self.height
        raw.fps = self.fps
        raw.expected_delay = self.expected_delay
        raw.mirror_on_local_render = int(self.mirror_on_local_render)


@dataclass(frozen=True)
class VideoCapturerListeners:
    """
    Handlers for capturer lifecycle events, each receiving the capturer.

    Attributes
    ----------
    on_init(capturer)
        The engine attached the capturer; ``provide_frame`` works from now.
    on_destroy(capturer)
    on_start(capturer)
        Begin producing frames.
    on_stop(capturer)
        Stop producing frames.
    """

    on_init: Callable[[VideoCapturer], None] | None = None
    on_destroy: Callable[[VideoCapturer], None] | None = None
    on_start: Callable[[VideoCapturer], None] | None = None
    on_stop: Callable[[VideoCapturer], None] | None = None


# =============================================================================
# Audio Device
# =============================================================================


@dataclass(frozen=True)
class AudioDeviceSettings:
    """Sampling parameters reported to the engine."""

    sampling_rate: int = 44100
    number_of_channels: int = 1

    @property
    def samples_per_10ms(self) -> int:
        """Samples the engine exchanges per 10 ms tick, all channels."""
        return (self.sampling_rate // 100) * self.number_of_channels

    def write_to(self, raw: Any) -> None:
        """Fill an ``otc_audio_device_settings`` struct."""
        raw.sampling_rate = self.sampling_rate
        raw.number_of_channels = self.number_of_channels


@dataclass(frozen=True)
class AudioSample:
    """
    Rendered audio read from the engine.

    Attributes
    ----------
        data: Interleaved signed 16-bit samples.
        sampling_rate: Samples per second per channel.
        number_of_channels: Channel count.
    """

    data: array = field(repr=False)
    sampling_rate: int
    number_of_channels: int

    def to_numpy(self) -> Any:
        """Samples as an ``int16`` array (requires numpy)."""
        import numpy as np

        return np.frombuffer(self.data.tobytes(), dtype=np.int16)


@dataclass(frozen=True)
class AudioRenderListeners:
    """
    Handlers for the engine's audio output.

    Attributes
    ----------
    on_start(device)
        The renderer started; the render loop is running.
    on_stop(device)
    on_audio_sample(device, sample)
        One :class:`AudioSample` per render tick.
    """

    on_start: Callable[[AudioDevice], None] | None = None
    on_stop: Callable[[AudioDevice], None] | None = None
    on_audio_sample: Callable[[AudioDevice, AudioSample], None] | None = None


@dataclass(frozen=True)
class AudioCaptureListeners:
    """
    Handlers for the engine's audio input.

    Attributes
    ----------
    on_start(device)
        The capturer started; ``push_audio_sample`` is accepted from now.
    on_stop(device)
    """

    on_start: Callable[[AudioDevice], None] | None = None
    on_stop: Callable[[AudioDevice], None] | None = None
