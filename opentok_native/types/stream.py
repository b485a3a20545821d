"""Stream value entity."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from .._bindings import from_c_string
from ..handle import NativeHandle
from .connection import Connection

__all__ = ["Stream", "StreamVideoType"]


class StreamVideoType(IntEnum):
    """Video source of a stream (``otc_stream_video_type``)."""

    CAMERA = 1
    SCREEN = 2
    CUSTOM = 3

    @classmethod
    def from_native(cls, value: int) -> StreamVideoType | None:
        """Map an engine value, or None if it is not a known type."""
        try:
            return cls(value)
        except ValueError:
            return None


class Stream:
    """
    A media stream published to a session.

    Copy-on-receipt, like :class:`~opentok_native.types.Connection`: the
    borrowed pointer is copied with ``otc_stream_copy`` and all fields are
    read immediately. The owned copy is kept because subscribing needs the
    stream handle (see :meth:`Subscriber.set_stream
    <opentok_native.subscriber.Subscriber.set_stream>`).

    Attributes
    ----------
    id : str
        Stream identifier.
    name : str | None
        Name given by the publisher.
    has_video, has_audio : bool
        Whether the stream is currently sending video / audio.
    has_video_track, has_audio_track : bool
        Whether the stream carries a video / audio track at all.
    video_width, video_height : int
        Video dimensions at the time of the snapshot.
    creation_time : int
        Creation timestamp, milliseconds since the Unix epoch.
    video_type : StreamVideoType | None
        Camera, screen or custom source.
    connection : Connection | None
        The publishing client's connection.
    """

    __slots__ = (
        "id",
        "name",
        "has_video",
        "has_video_track",
        "has_audio",
        "has_audio_track",
        "video_width",
        "video_height",
        "creation_time",
        "video_type",
        "connection",
        "_handle",
        "_released",
    )

    def __init__(self, lib: Any, handle: NativeHandle):
        self._handle = handle
        self._released = False
        ptr = handle.ptr
        self.id = from_c_string(lib.otc_stream_get_id(ptr)) or ""
        self.name = from_c_string(lib.otc_stream_get_name(ptr))
        self.has_video = bool(lib.otc_stream_has_video(ptr))
        self.has_video_track = bool(lib.otc_stream_has_video_track(ptr))
        self.has_audio = bool(lib.otc_stream_has_audio(ptr))
        self.has_audio_track = bool(lib.otc_stream_has_audio_track(ptr))
        self.video_width = int(lib.otc_stream_get_video_width(ptr))
        self.video_height = int(lib.otc_stream_get_video_height(ptr))
        self.creation_time = int(lib.otc_stream_get_creation_time(ptr))
        self.video_type = StreamVideoType.from_native(lib.otc_stream_get_video_type(ptr))

        # Borrowed from the stream; copied like any other borrowed pointer
        connection_ptr = lib.otc_stream_get_connection(ptr)
        self.connection = Connection.from_borrowed(lib, connection_ptr) if connection_ptr else None

    @classmethod
    def from_borrowed(cls, lib: Any, ptr: int | None) -> Stream:
        """Copy a callback-scoped stream pointer.

        Raises:
            NullHandleError: If ``ptr`` is null or the engine copy fails.
        """
        borrowed = NativeHandle.borrowed(ptr, "stream")
        return cls(lib, borrowed.copy(lib.otc_stream_copy, lib.otc_stream_delete))

    def __repr__(self) -> str:
        return f"Stream(id={self.id!r}, name={self.name!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stream):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(("stream", self.id))

    @property
    def handle(self) -> NativeHandle:
        """The owned copy of the engine stream."""
        return self._handle

    def close(self) -> None:
        """Release this object's share of the engine copies. Idempotent.

        The stream copy is deleted once no subscriber bound to it remains.
        Fields remain readable.
        """
        if self.connection is not None:
            self.connection.close()
        if self._released:
            return
        self._released = True
        self._handle.release()

    def __del__(self) -> None:
        """Release the engine copy on garbage collection."""
        if getattr(self, "_handle", None) is not None and not self._released:
            self._released = True
            self._handle.release()
