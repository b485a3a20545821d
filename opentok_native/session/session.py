"""
Session - connection to one OpenTok session.
"""

from __future__ import annotations

import ctypes
import threading
from typing import TYPE_CHECKING, Any

from .._bindings import from_c_string, to_c_string
from .._logging import scoped_logger
from .._managed import ManagedObject
from .types import SessionListeners, SessionState

if TYPE_CHECKING:
    from ..engine import Engine
    from ..publisher import Publisher
    from ..subscriber import Subscriber
    from ..types import Connection

__all__ = ["Session"]

log = scoped_logger("session")


class Session(ManagedObject):
    """
    A connection to an OpenTok session.

    ``connect`` and ``disconnect`` only submit requests: a normal return
    means the engine accepted it, and the outcome arrives later through
    ``on_connected`` / ``on_disconnected`` / ``on_error``.

    Args:
        api_key: OpenTok project API key.
        session_id: Session identifier.
        listeners: Event handlers; omitted handlers ignore their event.
        engine: Engine to use; defaults to the one from
            :func:`opentok_native.init`.

    Raises:
        NullHandleError: If the engine refuses to create the session.

    Example:
        >>> session = Session(api_key, session_id, SessionListeners(
        ...     on_connected=lambda s: s.publish(publisher),
        ...     on_stream_received=lambda s, stream: on_stream(stream),
        ... ))
        >>> session.connect(token)
    """

    kind = "session"

    def __init__(
        self,
        api_key: str,
        session_id: str,
        listeners: SessionListeners | None = None,
        engine: Engine | None = None,
    ):
        super().__init__(listeners or SessionListeners(), engine)
        self._session_id = session_id
        self._state = SessionState.DISCONNECTED
        self._state_lock = threading.Lock()
        # Attached objects stay alive while the session may route to them
        self._publishers: dict[int, Publisher] = {}
        self._subscribers: dict[int, Subscriber] = {}
        self._callbacks = self._engine.dispatcher.session_table(self._token)
        callbacks = ctypes.pointer(self._callbacks)
        self._attach(
            lambda: self._lib.otc_session_new(
                to_c_string(api_key), to_c_string(session_id), callbacks
            ),
            self._lib.otc_session_delete,
            keepalive=self._callbacks,
        )
        log.debug("Session created", extra={"session_id": session_id, "token": self._token})

    def __repr__(self) -> str:
        return f"Session(id={self._session_id!r}, state={self.state.value})"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def id(self) -> str:
        """Session identifier, as reported by the engine when available."""
        if self.is_alive:
            engine_id = from_c_string(self._lib.otc_session_get_id(self._ptr()))
            if engine_id:
                return engine_id
        return self._session_id

    @property
    def state(self) -> SessionState:
        """Last connection state reported by the engine."""
        with self._state_lock:
            return self._state

    @property
    def publishers(self) -> list[Publisher]:
        """Publishers attached with :meth:`publish`."""
        with self._state_lock:
            return list(self._publishers.values())

    @property
    def subscribers(self) -> list[Subscriber]:
        """Subscribers attached with :meth:`subscribe`."""
        with self._state_lock:
            return list(self._subscribers.values())

    def _set_state(self, state: SessionState) -> None:
        with self._state_lock:
            self._state = state

    # =========================================================================
    # Requests
    # =========================================================================

    def connect(self, token: str) -> None:
        """Request a connection using a client token.

        Raises:
            OpenTokError: If the engine rejects the request.
        """
        self._call("otc_session_connect", to_c_string(token))
        self._set_state(SessionState.CONNECTING)
        log.info("Connect requested", extra={"session_id": self._session_id})

    def disconnect(self) -> None:
        """Request disconnection. Completion is reported by ``on_disconnected``."""
        self._call("otc_session_disconnect")
        log.info("Disconnect requested", extra={"session_id": self._session_id})

    def publish(self, publisher: Publisher) -> None:
        """Start publishing. Accepted before the session connects.

        Raises:
            NullHandleError: If the publisher has no native handle.
        """
        self._call("otc_session_publish", publisher._ptr())
        with self._state_lock:
            self._publishers[publisher.token] = publisher
        publisher._attached_to(self)

    def unpublish(self, publisher: Publisher) -> None:
        """Stop publishing ``publisher`` in this session."""
        self._call("otc_session_unpublish", publisher._ptr())
        with self._state_lock:
            self._publishers.pop(publisher.token, None)
        publisher._attached_to(None)

    def subscribe(self, subscriber: Subscriber) -> None:
        """Start receiving the subscriber's stream.

        Raises:
            NullHandleError: If ``set_stream`` was not called on the subscriber.
        """
        self._call("otc_session_subscribe", subscriber._ptr())
        with self._state_lock:
            self._subscribers[subscriber.token] = subscriber
        subscriber._attached_to(self)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Stop receiving the subscriber's stream."""
        self._call("otc_session_unsubscribe", subscriber._ptr())
        with self._state_lock:
            self._subscribers.pop(subscriber.token, None)
        subscriber._attached_to(None)

    def send_signal(
        self,
        signal_type: str,
        data: str,
        connection: Connection | None = None,
    ) -> None:
        """Send a signal to every client, or to one connection.

        Args:
            signal_type: Application-defined type string.
            data: Payload.
            connection: Recipient; all clients when None.
        """
        if connection is None:
            self._call("otc_session_send_signal", to_c_string(signal_type), to_c_string(data))
        else:
            self._call(
                "otc_session_send_signal_to_connection",
                to_c_string(signal_type),
                to_c_string(data),
                connection.handle.ptr,
            )

    # =========================================================================
    # Teardown
    # =========================================================================

    def _detach_children(self) -> None:
        with self._state_lock:
            children: list[Any] = [*self._publishers.values(), *self._subscribers.values()]
            self._publishers.clear()
            self._subscribers.clear()
        for child in children:
            child._attached_to(None)

    def _forget(self, child: Publisher | Subscriber) -> None:
        """Drop a publisher or subscriber that is closing on its own."""
        with self._state_lock:
            self._publishers.pop(child.token, None)
            self._subscribers.pop(child.token, None)
        child._attached_to(None)

    def close(self) -> None:
        """Delete the session handle. Attached objects are released."""
        self._detach_children()
        super().close()

    # =========================================================================
    # Events
    # =========================================================================

    def _handle_event(self, event: str, ptr: int | None, *args: Any) -> Any:
        if event in ("connected", "reconnected"):
            self._set_state(SessionState.CONNECTED)
        elif event == "disconnected":
            self._set_state(SessionState.DISCONNECTED)
        elif event == "reconnection_started":
            self._set_state(SessionState.RECONNECTING)
        elif event == "error":
            message, code = args
            log.warning(
                "Session error: %s",
                message,
                extra={"session_id": self._session_id, "code": code.name},
            )
        return super()._handle_event(event, ptr, *args)

