"""
VideoCapturer - custom video source for a Publisher.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .._logging import scoped_logger
from .._managed import ManagedObject
from ._loop import CaptureLoop
from .types import VideoCapturerListeners, VideoCapturerSettings
from .video_frame import VideoFrame

if TYPE_CHECKING:
    from .._native import VideoCapturerCallbacksC
    from ..engine import Engine

__all__ = ["VideoCapturer"]

log = scoped_logger("capturer")

FrameSource = Callable[[], "VideoFrame | bytes | None"]


class VideoCapturer(ManagedObject):
    """
    A custom video source handed to :class:`~opentok_native.publisher.Publisher`.

    The capturer is inert until the engine's ``init`` event supplies its
    handle, which happens once a publisher using it is created. Before that
    (and after ``destroy``) :meth:`provide_frame` raises
    :class:`~opentok_native.exceptions.NullHandleError`.

    Frames can be pushed with :meth:`provide_frame` from any thread, or
    pulled: pass ``frame_source`` and the capturer runs a loop at
    ``settings.fps`` between the engine's ``start`` and ``stop`` events.

    Args:
        settings: Format, size and rate reported to the engine.
        listeners: Lifecycle handlers.
        frame_source: Callable returning the next frame (a VideoFrame, raw
            bytes in ``settings.format``, or None to skip a tick). Returned
            VideoFrames remain owned by the caller and may be reused; frames
            built from bytes are deleted after each tick.
        engine: Engine to use; defaults to the one from
            :func:`opentok_native.init`.

    Example:
        >>> capturer = VideoCapturer(
        ...     VideoCapturerSettings(width=640, height=480),
        ...     frame_source=camera.read,
        ... )
        >>> publisher = Publisher("custom", capturer=capturer)
    """

    kind = "video_capturer"

    def __init__(
        self,
        settings: VideoCapturerSettings | None = None,
        listeners: VideoCapturerListeners | None = None,
        frame_source: FrameSource | None = None,
        engine: Engine | None = None,
    ):
        super().__init__(listeners or VideoCapturerListeners(), engine)
        self._settings = settings or VideoCapturerSettings()
        self._frame_source = frame_source
        self._loop: CaptureLoop | None = None
        if frame_source is not None:
            self._loop = CaptureLoop(
                f"video-capturer-{self._token}", self._settings.frame_interval, self._pump
            )
        self._callbacks = self._engine.dispatcher.video_capturer_table(self._token)
        self._native.keepalive = self._callbacks
        # Routed before any handle exists: the init event delivers it
        self._register()

    def __repr__(self) -> str:
        s = self._settings
        state = "attached" if self.is_alive else "detached"
        return f"VideoCapturer({s.width}x{s.height}@{s.fps}, {state})"

    @property
    def settings(self) -> VideoCapturerSettings:
        return self._settings

    @property
    def callbacks(self) -> VideoCapturerCallbacksC:
        """Callback table passed to ``otc_publisher_new``."""
        return self._callbacks

    @property
    def is_capturing(self) -> bool:
        """True while the frame-source loop runs."""
        return self._loop is not None and self._loop.is_running

    def provide_frame(self, frame: VideoFrame, rotation: int = 0) -> None:
        """Hand one frame to the engine.

        Args:
            frame: Frame to send; the engine copies it.
            rotation: Clockwise rotation in degrees (0, 90, 180, 270).

        Raises:
            NullHandleError: If the engine has not initialized the capturer.
        """
        self._call("otc_video_capturer_provide_frame", rotation, frame.handle.ptr)

    def _pump(self) -> None:
        item = self._frame_source() if self._frame_source is not None else None
        if item is None:
            return
        if isinstance(item, VideoFrame):
            # Frames from the source stay owned by the source
            self.provide_frame(item)
            return
        s = self._settings
        frame = VideoFrame.new(s.format, s.width, s.height, item, engine=self._engine)
        try:
            self.provide_frame(frame)
        finally:
            frame.close()

    def close(self) -> None:
        """Stop the frame-source loop and deregister."""
        if self._loop is not None:
            self._loop.stop()
        super().close()

    # =========================================================================
    # Events
    # =========================================================================

    def _handle_event(self, event: str, ptr: int | None, *args: Any) -> Any:
        if event == "get_capture_settings":
            (settings,) = args
            if not settings:
                return False
            self._settings.write_to(settings.contents)
            return True

        if event == "init":
            self._adopt(ptr)
            log.debug("Capturer initialized", extra={"token": self._token})
        elif event == "start" and self._loop is not None:
            self._loop.start()
        elif event == "stop" and self._loop is not None:
            self._loop.stop()

        self._emit(event)

        if event == "destroy":
            if self._loop is not None:
                self._loop.stop()
            self._release_borrowed()
            log.debug("Capturer destroyed", extra={"token": self._token})
        return True
