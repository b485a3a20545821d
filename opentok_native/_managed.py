"""
Base class for engine-backed objects.

Session, Publisher, Subscriber, VideoCapturer and AudioDevice all follow
one lifecycle: allocate a registry token, create (or receive) a native
handle, receive events routed by token, and tear down by deregistering and
deleting the handle together. :class:`ManagedObject` implements it once;
subclasses set ``kind`` and override :meth:`ManagedObject._handle_event`
for the events that change their own state.
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

from ._bindings import check
from .exceptions import NullHandleError
from .handle import Deleter, NativeHandle

if TYPE_CHECKING:
    from .engine import Engine

__all__ = ["ManagedObject"]


class _NativeState:
    """What a finalizer needs to release an object, without the object."""

    __slots__ = ("handle", "before_delete", "after_delete", "keepalive")

    def __init__(self) -> None:
        self.handle: NativeHandle | None = None
        self.before_delete: Callable[[int], None] | None = None
        # Releases handles shared with the native object, once it is deleted
        self.after_delete: Callable[[], None] | None = None
        # Callback tables the engine reads until the handle is deleted
        self.keepalive: Any = None

    def teardown(self) -> None:
        handle = self.handle
        if handle is None or handle.is_null:
            return
        if handle.owned and self.before_delete is not None:
            self.before_delete(handle.ptr)
        try:
            handle.request_delete()
        finally:
            if self.after_delete is not None:
                self.after_delete()


class ManagedObject:
    """
    One engine object with token routing and delete-once teardown.

    Subclasses call :meth:`_attach` (engine creates the handle) or
    :meth:`_register` (engine supplies it later through an event).
    """

    kind: ClassVar[str] = "object"

    def __init__(self, listeners: Any = None, engine: Engine | None = None):
        if engine is None:
            from .engine import get_engine

            engine = get_engine()
        self._engine = engine
        self._lib = engine.lib
        self._registry = engine.registry
        self._token = self._registry.new_token()
        self._native = _NativeState()
        self._listeners = listeners
        self._listeners_lock = threading.Lock()
        # Runs once: on close() or when the object is garbage collected
        self._finalizer = weakref.finalize(
            self, self._registry.detach, self._token, self._native.teardown
        )

    def __repr__(self) -> str:
        state = "alive" if self.is_alive else "closed"
        return f"{self.__class__.__name__}(token={self._token}, {state})"

    def __enter__(self):
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def engine(self) -> Engine:
        """The engine this object belongs to."""
        return self._engine

    @property
    def token(self) -> int:
        """Routing token passed to the engine as user data."""
        return self._token

    @property
    def is_alive(self) -> bool:
        """True while the native handle exists and has not been deleted."""
        handle = self._native.handle
        return handle is not None and not handle.is_null

    def _register(self) -> None:
        self._registry.register(self._token, self, self.kind)

    def _attach(
        self,
        create: Callable[[], int | None],
        deleter: Deleter,
        before_delete: Callable[[int], None] | None = None,
        after_delete: Callable[[], None] | None = None,
        keepalive: Any = None,
    ) -> NativeHandle:
        self._native.before_delete = before_delete
        self._native.after_delete = after_delete
        self._native.keepalive = keepalive
        handle = self._registry.attach(self._token, self, self.kind, create, deleter)
        self._native.handle = handle
        return handle

    def _adopt(self, ptr: int | None) -> None:
        """Take a borrowed handle supplied by an engine event."""
        self._native.handle = NativeHandle.borrowed(ptr, self.kind)
        self._registry.bind_ptr(self._token, ptr)

    def _release_borrowed(self) -> None:
        handle = self._native.handle
        if handle is not None and not handle.owned:
            handle.request_delete()
        self._registry.bind_ptr(self._token, None)

    def close(self) -> None:
        """Deregister and delete the native handle. Safe to call repeatedly."""
        self._finalizer()

    # =========================================================================
    # Engine calls
    # =========================================================================

    def _ptr(self) -> int:
        handle = self._native.handle
        if handle is None:
            raise NullHandleError(
                f"{self.kind} has no native handle yet",
                details={"kind": self.kind, "token": self._token},
            )
        return handle.ptr

    def _call(self, name: str, *args: Any) -> None:
        """Call ``name(handle, *args)`` on the library and check its status."""
        status = getattr(self._lib, name)(self._ptr(), *args)
        check(status, {"operation": name, "kind": self.kind, "token": self._token})

    # =========================================================================
    # Events
    # =========================================================================

    @property
    def listeners(self) -> Any:
        """The listener set in effect."""
        with self._listeners_lock:
            return self._listeners

    def _emit(self, event: str, *args: Any) -> Any:
        # Hold the lock for the read only; a listener may call back into self
        with self._listeners_lock:
            listeners = self._listeners
        handler = getattr(listeners, f"on_{event}", None) if listeners is not None else None
        if handler is None:
            return None
        return handler(self, *args)

    def _handle_event(self, event: str, ptr: int | None, *args: Any) -> Any:
        """Entry point for routed engine events; forwards to the listener."""
        return self._emit(event, *args)
