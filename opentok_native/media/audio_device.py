"""
AudioDevice - the engine's single custom audio device.

The engine supports exactly one audio device, installed right after
``otc_init``. The device table is always installed, whether or not the
application consumes rendered audio or pushes captured audio, so the engine
never runs without a device.

Rendered audio is the mix of every subscribed stream; the engine offers no
per-participant samples.
"""

from __future__ import annotations

import ctypes
import threading
from array import array
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from .._bindings import check
from .._logging import scoped_logger
from .._managed import ManagedObject
from ..exceptions import (
    CaptureCallbacksOverrideNotAllowedError,
    InvalidParamError,
    RenderCallbacksOverrideNotAllowedError,
    error_for_status,
)
from ._loop import CaptureLoop
from .types import (
    AudioCaptureListeners,
    AudioDeviceSettings,
    AudioRenderListeners,
    AudioSample,
)

if TYPE_CHECKING:
    from ..engine import Engine

__all__ = ["AudioDevice"]

log = scoped_logger("audio")

# Seconds between render reads; the engine exchanges audio in 10 ms chunks
RENDER_INTERVAL = 0.01

AudioSampleCallback = Callable[[AudioSample], None]


class AudioDevice(ManagedObject):
    """
    Custom audio input and output for one engine.

    Created by :meth:`Engine.init <opentok_native.engine.Engine.init>`;
    applications reach it through :meth:`get_instance` or
    ``engine.audio_device``.

    Example:
        >>> device = AudioDevice.get_instance()
        >>> device.set_on_audio_sample_callback(lambda s: speaker.write(s.data))
        >>> device.push_audio_sample(microphone.read(441))
    """

    kind = "audio_device"

    def __init__(self, engine: Engine):
        super().__init__(None, engine)
        self._lock = threading.Lock()
        self._capture_settings = AudioDeviceSettings()
        self._render_settings = AudioDeviceSettings()
        self._render_listeners: AudioRenderListeners | None = None
        self._capture_listeners: AudioCaptureListeners | None = None
        self._sample_callbacks: list[AudioSampleCallback] = []
        self._capturer_ready = threading.Event()
        self._render_loop = CaptureLoop("audio-render", RENDER_INTERVAL, self._render_step)

        self._callbacks = self._engine.dispatcher.audio_device_table(self._token)
        self._native.keepalive = self._callbacks
        self._register()
        error = error_for_status(
            self._lib.otc_set_audio_device(ctypes.pointer(self._callbacks)),
            {"operation": "otc_set_audio_device"},
        )
        # The engine falls back to its built-in device
        if error is not None:
            log.warning("Could not install audio device: %s", error, extra={"code": error.code})
        else:
            log.debug("Audio device installed", extra={"token": self._token})

    def __repr__(self) -> str:
        return (
            f"AudioDevice(capture={self.is_capturing}, render={self.is_rendering})"
        )

    @classmethod
    def get_instance(cls) -> AudioDevice:
        """The default engine's audio device.

        Raises:
            InitializationError: If :func:`opentok_native.init` was not called.
        """
        from ..engine import get_engine

        return get_engine().audio_device

    # =========================================================================
    # Settings
    # =========================================================================

    @property
    def capture_settings(self) -> AudioDeviceSettings:
        with self._lock:
            return self._capture_settings

    @property
    def render_settings(self) -> AudioDeviceSettings:
        with self._lock:
            return self._render_settings

    def override_capture_settings(self, settings: AudioDeviceSettings) -> None:
        """Settings reported the next time the engine asks for capture settings."""
        with self._lock:
            self._capture_settings = settings

    def override_render_settings(self, settings: AudioDeviceSettings) -> None:
        """Settings reported the next time the engine asks for render settings.

        A running render loop keeps the chunk size it started with.
        """
        with self._lock:
            self._render_settings = settings

    # =========================================================================
    # Listeners
    # =========================================================================

    def set_render_callbacks(self, listeners: AudioRenderListeners) -> None:
        """Install the render listeners. Allowed once per device.

        Raises:
            RenderCallbacksOverrideNotAllowedError: On a second call.
        """
        with self._lock:
            if self._render_listeners is not None:
                raise RenderCallbacksOverrideNotAllowedError()
            self._render_listeners = listeners

    def set_capture_callbacks(self, listeners: AudioCaptureListeners) -> None:
        """Install the capture listeners. Allowed once per device.

        Raises:
            CaptureCallbacksOverrideNotAllowedError: On a second call.
        """
        with self._lock:
            if self._capture_listeners is not None:
                raise CaptureCallbacksOverrideNotAllowedError()
            self._capture_listeners = listeners

    def set_on_audio_sample_callback(self, callback: AudioSampleCallback) -> None:
        """Add a consumer of rendered audio; called once per 10 ms chunk."""
        with self._lock:
            self._sample_callbacks.append(callback)

    # =========================================================================
    # Capture
    # =========================================================================

    @property
    def is_capturing(self) -> bool:
        """True between the engine's start_capturer and stop_capturer."""
        return self._capturer_ready.is_set()

    @property
    def is_rendering(self) -> bool:
        return self._render_loop.is_running

    def push_audio_sample(self, samples: bytes | array | Iterable[int]) -> None:
        """Send captured audio to the engine.

        Samples are interleaved signed 16-bit integers, given as raw bytes,
        an ``array('h')`` or any iterable of ints. They are dropped with a
        warning while the engine has not started the capturer.

        Raises:
            InvalidParamError: If raw bytes do not hold whole samples.
            OpenTokError: If the engine rejects the data.
        """
        if not self._capturer_ready.is_set():
            log.warning("Audio capturer is not started; dropping audio sample")
            return
        if isinstance(samples, (bytes, bytearray, memoryview)):
            raw = bytes(samples)
            if len(raw) % 2:
                raise InvalidParamError(
                    "Audio sample bytes must hold whole 16-bit samples",
                    details={"operation": "push_audio_sample", "length": len(raw)},
                )
            data = array("h")
            data.frombytes(raw)
        elif isinstance(samples, array) and samples.typecode == "h":
            data = samples
        else:
            data = array("h", samples)
        count = len(data)
        if count == 0:
            return
        buffer = (ctypes.c_int16 * count).from_buffer_copy(data.tobytes())
        check(
            self._lib.otc_audio_device_write_capture_data(buffer, count),
            {"operation": "otc_audio_device_write_capture_data", "count": count},
        )

    # =========================================================================
    # Render
    # =========================================================================

    def _render_step(self) -> None:
        with self._lock:
            settings = self._render_settings
            callbacks = list(self._sample_callbacks)
            listeners = self._render_listeners
        size = settings.samples_per_10ms
        buffer = (ctypes.c_int16 * size)()
        count = self._lib.otc_audio_device_read_render_data(buffer, size)
        if not count:
            return
        sample = AudioSample(
            data=array("h", buffer[: min(count, size)]),
            sampling_rate=settings.sampling_rate,
            number_of_channels=settings.number_of_channels,
        )
        for callback in callbacks:
            try:
                callback(sample)
            except Exception:
                log.error("Audio sample callback failed", exc_info=True)
        if listeners is not None and listeners.on_audio_sample is not None:
            listeners.on_audio_sample(self, sample)

    def stop(self) -> None:
        """Stop the render loop and refuse further captured audio."""
        self._capturer_ready.clear()
        self._render_loop.stop()

    # =========================================================================
    # Events
    # =========================================================================

    def _notify(self, listeners: Any, event: str) -> None:
        handler = getattr(listeners, f"on_{event}", None) if listeners is not None else None
        if handler is not None:
            handler(self)

    def _handle_event(self, event: str, ptr: int | None, *args: Any) -> Any:
        if event in ("get_capture_settings", "get_render_settings"):
            (settings,) = args
            if not settings:
                return False
            with self._lock:
                current = (
                    self._capture_settings
                    if event == "get_capture_settings"
                    else self._render_settings
                )
            current.write_to(settings.contents)
            return True

        with self._lock:
            capture_listeners = self._capture_listeners
            render_listeners = self._render_listeners

        if event == "start_capturer":
            self._capturer_ready.set()
            self._notify(capture_listeners, "start")
        elif event == "stop_capturer":
            self._capturer_ready.clear()
            self._notify(capture_listeners, "stop")
        elif event == "start_renderer":
            self._render_loop.start()
            self._notify(render_listeners, "start")
        elif event == "stop_renderer":
            self._render_loop.stop()
            self._notify(render_listeners, "stop")
        log.debug("Audio device %s", event)
        return True
