"""
Subscriber - inbound audio/video stream.
"""

from __future__ import annotations

import ctypes
import threading
import weakref
from functools import partial
from typing import TYPE_CHECKING, Any

from .._bindings import from_c_string
from .._logging import scoped_logger
from .._managed import ManagedObject
from ..exceptions import AlreadyInitializedError, OpenTokError, error_for_status
from .types import SubscriberListeners

if TYPE_CHECKING:
    from ..engine import Engine
    from ..session import Session
    from ..types import Stream

__all__ = ["Subscriber"]

log = scoped_logger("subscriber")


def _unsubscribe_before_delete(lib: Any, ptr: int) -> None:
    """Unsubscribe from the session the engine reports, if any."""
    session_ptr = lib.otc_subscriber_get_session(ptr)
    if not session_ptr:
        return
    error = error_for_status(
        lib.otc_session_unsubscribe(session_ptr, ptr), {"operation": "otc_session_unsubscribe"}
    )
    if error is not None:
        log.warning("Unsubscribe before delete failed: %s", error, extra={"code": error.code})


class Subscriber(ManagedObject):
    """
    Receives one stream of a session.

    The subscriber has no native handle until :meth:`set_stream` binds it
    to a stream; every engine call before that raises
    :class:`~opentok_native.exceptions.NullHandleError`.

    Args:
        listeners: Event handlers.
        engine: Engine to use; defaults to the one from
            :func:`opentok_native.init`.

    Example:
        >>> def on_stream_received(session, stream):
        ...     subscriber = Subscriber(SubscriberListeners(
        ...         on_render_frame=lambda sub, frame: show(frame),
        ...     ))
        ...     subscriber.set_stream(stream)
        ...     session.subscribe(subscriber)
    """

    kind = "subscriber"

    def __init__(
        self,
        listeners: SubscriberListeners | None = None,
        engine: Engine | None = None,
    ):
        super().__init__(listeners or SubscriberListeners(), engine)
        self._stream: Stream | None = None
        self._bind_lock = threading.Lock()
        self._session_ref: weakref.ref[Session] | None = None
        self._callbacks = self._engine.dispatcher.subscriber_table(self._token)

    def __repr__(self) -> str:
        stream_id = self._stream.id if self._stream is not None else None
        return f"Subscriber(stream={stream_id!r}, token={self._token})"

    # =========================================================================
    # Stream binding
    # =========================================================================

    def set_stream(self, stream: Stream) -> None:
        """Bind the stream to receive and create the native subscriber.

        Can be called once. The engine's subscriber-creation call takes the
        stream handle, so this is where the subscriber comes to exist.

        Raises:
            AlreadyInitializedError: If a stream was already bound.
            NullHandleError: If the stream was closed or the engine refuses
                to create the subscriber.
        """
        with self._bind_lock:
            if self._stream is not None:
                raise AlreadyInitializedError(
                    "Subscriber stream is already set",
                    details={"stream_id": self._stream.id, "rejected_stream_id": stream.id},
                )
            # The stream handle stays alive until the native subscriber is deleted
            stream_handle = stream.handle.retain()
            callbacks = ctypes.pointer(self._callbacks)
            try:
                self._attach(
                    lambda: self._lib.otc_subscriber_new(stream_handle.ptr, callbacks),
                    self._lib.otc_subscriber_delete,
                    before_delete=partial(_unsubscribe_before_delete, self._lib),
                    after_delete=stream_handle.release,
                    keepalive=(self._callbacks, stream),
                )
            except OpenTokError:
                self._native.after_delete = None
                stream_handle.release()
                raise
            self._stream = stream
        log.debug("Subscriber bound", extra={"stream_id": stream.id, "token": self._token})

    def get_stream(self) -> Stream | None:
        """The bound stream, or None before :meth:`set_stream`."""
        with self._bind_lock:
            return self._stream

    stream = property(get_stream)

    @property
    def session(self) -> Session | None:
        """The session this subscriber was attached to, if any."""
        ref = self._session_ref
        return ref() if ref is not None else None

    @property
    def subscriber_id(self) -> str | None:
        return from_c_string(self._lib.otc_subscriber_get_subscriber_id(self._ptr()))

    # =========================================================================
    # Media toggles
    # =========================================================================

    def set_subscribe_to_video(self, enabled: bool) -> None:
        """Start or stop receiving video."""
        self._call("otc_subscriber_set_subscribe_to_video", int(enabled))

    def set_subscribe_to_audio(self, enabled: bool) -> None:
        """Start or stop receiving audio."""
        self._call("otc_subscriber_set_subscribe_to_audio", int(enabled))

    @property
    def is_subscribed_to_video(self) -> bool:
        return bool(self._lib.otc_subscriber_get_subscribe_to_video(self._ptr()))

    @property
    def is_subscribed_to_audio(self) -> bool:
        return bool(self._lib.otc_subscriber_get_subscribe_to_audio(self._ptr()))

    # =========================================================================
    # Quality negotiation
    # =========================================================================

    def set_preferred_resolution(self, width: int, height: int) -> None:
        """Ask the server for a resolution (routed sessions only)."""
        self._call("otc_subscriber_set_preferred_resolution", width, height)

    def get_preferred_resolution(self) -> tuple[int, int]:
        width = ctypes.c_uint32()
        height = ctypes.c_uint32()
        self._call(
            "otc_subscriber_get_preferred_resolution",
            ctypes.pointer(width),
            ctypes.pointer(height),
        )
        return width.value, height.value

    def set_preferred_framerate(self, framerate: float) -> None:
        """Ask the server for a frame rate (routed sessions only)."""
        self._call("otc_subscriber_set_preferred_framerate", framerate)

    def get_preferred_framerate(self) -> float:
        framerate = ctypes.c_float()
        self._call("otc_subscriber_get_preferred_framerate", ctypes.pointer(framerate))
        return framerate.value

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def unsubscribe(self) -> None:
        """Unsubscribe from the attached session. No-op when not attached."""
        session = self.session
        if session is not None:
            session.unsubscribe(self)

    def close(self) -> None:
        """Unsubscribe if attached, then delete the subscriber handle."""
        session = self.session
        if session is not None:
            session._forget(self)
        super().close()

    def _attached_to(self, session: Session | None) -> None:
        self._session_ref = weakref.ref(session) if session is not None else None

    def _handle_event(self, event: str, ptr: int | None, *args: Any) -> Any:
        if event == "error":
            message, code = args
            log.warning(
                "Subscriber error: %s",
                message,
                extra={"stream_id": self._stream.id if self._stream else None, "code": code.name},
            )
        return super()._handle_event(event, ptr, *args)
