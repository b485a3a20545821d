"""
Publisher - outbound audio/video stream.
"""

from __future__ import annotations

import ctypes
import threading
import weakref
from functools import partial
from typing import TYPE_CHECKING, Any

from .._bindings import from_c_string, to_c_string
from .._logging import scoped_logger
from .._managed import ManagedObject
from ..exceptions import InvalidParamError, error_for_status
from .types import PublisherListeners

if TYPE_CHECKING:
    from ..engine import Engine
    from ..media.video_capturer import VideoCapturer
    from ..session import Session
    from ..types import Stream

__all__ = ["Publisher"]

log = scoped_logger("publisher")


def _unpublish_before_delete(lib: Any, ptr: int) -> None:
    """Unpublish from the session the engine reports, if any."""
    session_ptr = lib.otc_publisher_get_session(ptr)
    if not session_ptr:
        return
    error = error_for_status(
        lib.otc_session_unpublish(session_ptr, ptr), {"operation": "otc_session_unpublish"}
    )
    # Deletion proceeds either way; the engine must not keep the handle
    if error is not None:
        log.warning("Unpublish before delete failed: %s", error, extra={"code": error.code})


class Publisher(ManagedObject):
    """
    An outbound stream, from the default devices or a custom capturer.

    Args:
        name: Stream name shown to other clients.
        listeners: Event handlers.
        capturer: Custom video source. Its callback table is handed to the
            engine with the publisher.
        engine: Engine to use; defaults to the one from
            :func:`opentok_native.init`.

    Raises:
        NullHandleError: If the engine refuses to create the publisher.
        InvalidParamError: If ``capturer`` belongs to another engine.

    Example:
        >>> publisher = Publisher("camera", PublisherListeners(
        ...     on_stream_created=lambda p, stream: print(stream.id),
        ... ))
        >>> session.publish(publisher)
        >>> publisher.toggle_audio(False)
    """

    kind = "publisher"

    def __init__(
        self,
        name: str,
        listeners: PublisherListeners | None = None,
        capturer: VideoCapturer | None = None,
        engine: Engine | None = None,
    ):
        super().__init__(listeners or PublisherListeners(), engine)
        if capturer is not None and capturer.engine is not self._engine:
            raise InvalidParamError(
                "Capturer belongs to a different engine", details={"name": name}
            )
        self._name = name
        self._capturer = capturer
        self._stream: Stream | None = None
        self._stream_lock = threading.Lock()
        self._session_ref: weakref.ref[Session] | None = None

        self._callbacks = self._engine.dispatcher.publisher_table(self._token)
        callbacks = ctypes.pointer(self._callbacks)
        capturer_table = capturer.callbacks if capturer is not None else None
        capturer_callbacks = ctypes.pointer(capturer_table) if capturer_table is not None else None
        self._attach(
            lambda: self._lib.otc_publisher_new(
                to_c_string(name), capturer_callbacks, callbacks
            ),
            self._lib.otc_publisher_delete,
            before_delete=partial(_unpublish_before_delete, self._lib),
            keepalive=(self._callbacks, capturer_table),
        )
        log.debug("Publisher created", extra={"publisher_name": name, "token": self._token})

    def __repr__(self) -> str:
        return f"Publisher(name={self._name!r}, token={self._token})"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def capturer(self) -> VideoCapturer | None:
        return self._capturer

    @property
    def stream(self) -> Stream | None:
        """The published stream, once ``on_stream_created`` has fired."""
        with self._stream_lock:
            return self._stream

    @property
    def session(self) -> Session | None:
        """The session this publisher was published to, if any."""
        ref = self._session_ref
        return ref() if ref is not None else None

    @property
    def publisher_id(self) -> str | None:
        """Engine-assigned publisher identifier."""
        return from_c_string(self._lib.otc_publisher_get_publisher_id(self._ptr()))

    @property
    def is_publishing_audio(self) -> bool:
        return bool(self._lib.otc_publisher_get_publish_audio(self._ptr()))

    @property
    def is_publishing_video(self) -> bool:
        return bool(self._lib.otc_publisher_get_publish_video(self._ptr()))

    # =========================================================================
    # Requests
    # =========================================================================

    def toggle_audio(self, enabled: bool) -> None:
        """Start or stop publishing audio."""
        self._call("otc_publisher_set_publish_audio", int(enabled))

    def toggle_video(self, enabled: bool) -> None:
        """Start or stop publishing video."""
        self._call("otc_publisher_set_publish_video", int(enabled))

    def unpublish(self) -> None:
        """Unpublish from the attached session. No-op when not attached."""
        session = self.session
        if session is not None:
            session.unpublish(self)

    def close(self) -> None:
        """Unpublish if attached, then delete the publisher handle."""
        session = self.session
        if session is not None:
            session._forget(self)
        super().close()

    def _attached_to(self, session: Session | None) -> None:
        self._session_ref = weakref.ref(session) if session is not None else None

    # =========================================================================
    # Events
    # =========================================================================

    def _handle_event(self, event: str, ptr: int | None, *args: Any) -> Any:
        if event == "stream_created":
            with self._stream_lock:
                self._stream = args[0]
        elif event == "stream_destroyed":
            with self._stream_lock:
                if self._stream is not None and self._stream.id == args[0].id:
                    self._stream = None
        elif event == "error":
            message, code = args
            log.warning(
                "Publisher error: %s",
                message,
                extra={"publisher_name": self._name, "code": code.name},
            )
        return super()._handle_event(event, ptr, *args)
