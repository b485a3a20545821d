"""
Video frames.

A :class:`VideoFrame` owns one ``otc_video_frame``. Frames handed to
callbacks (rendered frames) are copied before the callback returns; frames
built by the application own both the engine frame and the Python buffer
it was created from, and both are released exactly once.
"""

from __future__ import annotations

import ctypes
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from ..handle import NativeHandle

if TYPE_CHECKING:
    import numpy as np

    from ..engine import Engine

__all__ = ["FrameFormat", "FramePlane", "VideoFrame"]


class FrameFormat(IntEnum):
    """Pixel format (``otc_video_frame_format``)."""

    UNKNOWN = 0
    YUV420P = 1
    NV12 = 2
    NV21 = 3
    YUY2 = 4
    UYVY = 5
    ARGB32 = 6
    BGRA32 = 7
    RGB24 = 8
    ABGR32 = 9
    MJPEG = 10
    RGBA32 = 11
    MAX = 12
    COMPRESSED = 255

    @classmethod
    def from_native(cls, value: int) -> FrameFormat:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class FramePlane(IntEnum):
    """Frame plane selector (``otc_video_frame_plane``)."""

    Y = 0
    U = 1
    V = 2
    PACKED = 3
    UV_INTERLEAVED = 4
    VU_INTERLEAVED = 5


def _lib_for(engine: Engine | None) -> Any:
    if engine is None:
        from ..engine import get_engine

        engine = get_engine()
    return engine.lib


def _as_buffer(data: bytes | bytearray | memoryview) -> ctypes.Array:
    return (ctypes.c_uint8 * len(data)).from_buffer_copy(data)


class VideoFrame:
    """
    One video frame owned by the host.

    Construct with :meth:`new`, :meth:`new_mjpeg`, :meth:`new_compressed`,
    or receive one through an ``on_render_frame`` listener.

    Example:
        >>> frame = VideoFrame.new(FrameFormat.RGBA32, 2, 2, bytes(16))
        >>> frame.width, frame.height
        (2, 2)
        >>> capturer.provide_frame(frame)
    """

    __slots__ = ("_lib", "_handle", "_buffer")

    def __init__(self, lib: Any, handle: NativeHandle, buffer: ctypes.Array | None = None):
        self._lib = lib
        self._handle = handle
        # The engine may reference this memory for the frame's lifetime
        self._buffer = buffer

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def _own(cls, lib: Any, ptr: int | None, buffer: ctypes.Array | None = None) -> VideoFrame:
        handle = NativeHandle.owned_by_host(ptr, "video_frame", lib.otc_video_frame_delete)
        return cls(lib, handle, buffer)

    @classmethod
    def new(
        cls,
        format: FrameFormat | int,
        width: int,
        height: int,
        data: bytes | bytearray | memoryview,
        engine: Engine | None = None,
    ) -> VideoFrame:
        """Create a raw frame from a pixel buffer.

        Raises:
            NullHandleError: If the engine rejects the frame.
        """
        lib = _lib_for(engine)
        buffer = _as_buffer(data)
        return cls._own(lib, lib.otc_video_frame_new(int(format), width, height, buffer), buffer)

    @classmethod
    def new_mjpeg(
        cls, width: int, height: int, data: bytes, engine: Engine | None = None
    ) -> VideoFrame:
        """Create an MJPEG frame."""
        lib = _lib_for(engine)
        buffer = _as_buffer(data)
        ptr = lib.otc_video_frame_new_MJPEG(width, height, buffer, len(data))
        return cls._own(lib, ptr, buffer)

    @classmethod
    def new_compressed(
        cls, width: int, height: int, data: bytes, engine: Engine | None = None
    ) -> VideoFrame:
        """Create a frame holding already-encoded data."""
        lib = _lib_for(engine)
        buffer = _as_buffer(data)
        ptr = lib.otc_video_frame_new_compressed(width, height, buffer, len(data))
        return cls._own(lib, ptr, buffer)

    @classmethod
    def from_borrowed(cls, lib: Any, ptr: int | None) -> VideoFrame:
        """Copy a frame the engine lent to a callback."""
        borrowed = NativeHandle.borrowed(ptr, "video_frame")
        return cls(lib, borrowed.copy(lib.otc_video_frame_copy, lib.otc_video_frame_delete))

    def __repr__(self) -> str:
        if self._handle.is_null:
            return "VideoFrame(deleted)"
        return f"VideoFrame({self.format.name}, {self.width}x{self.height})"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def format(self) -> FrameFormat:
        return FrameFormat.from_native(self._lib.otc_video_frame_get_format(self._handle.ptr))

    @property
    def width(self) -> int:
        return int(self._lib.otc_video_frame_get_width(self._handle.ptr))

    @property
    def height(self) -> int:
        return int(self._lib.otc_video_frame_get_height(self._handle.ptr))

    @property
    def timestamp(self) -> int:
        """Capture timestamp set by the producer."""
        return int(self._lib.otc_video_frame_get_timestamp(self._handle.ptr))

    @timestamp.setter
    def timestamp(self, value: int) -> None:
        self._lib.otc_video_frame_set_timestamp(self._handle.ptr, value)

    @property
    def number_of_planes(self) -> int:
        return int(self._lib.otc_video_frame_get_number_of_planes(self._handle.ptr))

    @property
    def buffer(self) -> bytes:
        """Copy of the whole frame buffer."""
        ptr = self._handle.ptr
        size = int(self._lib.otc_video_frame_get_buffer_size(ptr))
        data = self._lib.otc_video_frame_get_buffer(ptr)
        if not data or size == 0:
            return b""
        return ctypes.string_at(data, size)

    # =========================================================================
    # Planes
    # =========================================================================

    def plane_size(self, plane: FramePlane | int) -> int:
        return int(self._lib.otc_video_frame_get_plane_size(self._handle.ptr, int(plane)))

    def plane_stride(self, plane: FramePlane | int) -> int:
        return int(self._lib.otc_video_frame_get_plane_stride(self._handle.ptr, int(plane)))

    def plane_width(self, plane: FramePlane | int) -> int:
        return int(self._lib.otc_video_frame_get_plane_width(self._handle.ptr, int(plane)))

    def plane_height(self, plane: FramePlane | int) -> int:
        return int(self._lib.otc_video_frame_get_plane_height(self._handle.ptr, int(plane)))

    def plane_data(self, plane: FramePlane | int) -> bytes:
        """Copy of one plane's bytes."""
        ptr = self._handle.ptr
        size = self.plane_size(plane)
        data = self._lib.otc_video_frame_get_plane_binary_data(ptr, int(plane))
        if not data or size == 0:
            return b""
        return ctypes.string_at(data, size)

    # =========================================================================
    # Conversion
    # =========================================================================

    def convert(self, format: FrameFormat | int) -> VideoFrame:
        """Return a new frame converted to ``format``.

        Raises:
            NullHandleError: If the engine cannot convert to that format.
        """
        ptr = self._lib.otc_video_frame_convert(int(format), self._handle.ptr)
        return self._own(self._lib, ptr)

    def to_numpy(self) -> np.ndarray:
        """Frame buffer as a ``uint8`` array (requires numpy).

        Packed formats are shaped ``(height, width, channels)``; anything
        else is returned flat.
        """
        import numpy as np

        data = np.frombuffer(self.buffer, dtype=np.uint8)
        channels = _PACKED_CHANNELS.get(self.format)
        width, height = self.width, self.height
        if channels and data.size == width * height * channels:
            return data.reshape(height, width, channels)
        return data

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Delete the engine frame. Idempotent."""
        self._handle.request_delete()
        self._buffer = None

    def __enter__(self) -> VideoFrame:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __del__(self) -> None:
        """Release the engine frame on garbage collection."""
        if getattr(self, "_handle", None) is not None:
            self._handle.request_delete()


_PACKED_CHANNELS = {
    FrameFormat.ARGB32: 4,
    FrameFormat.BGRA32: 4,
    FrameFormat.ABGR32: 4,
    FrameFormat.RGBA32: 4,
    FrameFormat.RGB24: 3,
}
