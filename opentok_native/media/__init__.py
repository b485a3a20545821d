"""
Custom media: frames, video capturers, and the audio device.

Video flows in through :class:`VideoCapturer` (frames pushed with
``provide_frame`` or pulled from a ``frame_source``) and out through the
``on_render_frame`` listeners of publishers and subscribers. Audio flows
through the engine's single :class:`AudioDevice`.
"""

from .audio_device import AudioDevice
from .types import (
    AudioCaptureListeners,
    AudioDeviceSettings,
    AudioRenderListeners,
    AudioSample,
    VideoCapturerListeners,
    VideoCapturerSettings,
)
from .video_capturer import VideoCapturer
from .video_frame import FrameFormat, FramePlane, VideoFrame

__all__ = [
    "AudioCaptureListeners",
    "AudioDevice",
    "AudioDeviceSettings",
    "AudioRenderListeners",
    "AudioSample",
    "FrameFormat",
    "FramePlane",
    "VideoCapturer",
    "VideoCapturerListeners",
    "VideoCapturerSettings",
    "VideoFrame",
]
