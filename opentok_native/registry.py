"""
Instance registry.

Routes engine callbacks back to the Python object that owns them. Every
callback table handed to the engine carries a host-generated integer token
in its ``user_data`` slot; trampolines resolve that token here. Callbacks
without a user-data slot fall back to the handle pointer index.

Registration is atomic with handle creation, and deregistration is atomic
with handle deletion: both happen under the same lock, so a trampoline
either finds a live object with a live handle or finds nothing.

Entries hold their object weakly. An object the application no longer
references is torn down by its finalizer; until then lookups succeed.
"""

from __future__ import annotations

import itertools
import threading
import weakref
from collections.abc import Callable
from typing import Any

from ._logging import scoped_logger
from .handle import Deleter, NativeHandle

__all__ = ["InstanceRegistry"]

log = scoped_logger("registry")


class _Entry:
    __slots__ = ("kind", "ref", "handle", "ptr")

    def __init__(self, kind: str, ref: weakref.ref, handle: NativeHandle | None, ptr: int | None):
        self.kind = kind
        self.ref = ref
        self.handle = handle
        self.ptr = ptr


class InstanceRegistry:
    """
    Token-keyed map from callback identity to managed object.

    One registry belongs to one :class:`~opentok_native.engine.Engine`;
    separate engines (e.g., separate fake engines in tests) never share
    routing state.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: dict[int, _Entry] = {}
        self._by_ptr: dict[int, int] = {}
        # Token 0 would arrive as a NULL user_data
        self._tokens = itertools.count(1)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries

    def new_token(self) -> int:
        """Allocate a token for one managed object."""
        return next(self._tokens)

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, token: int, obj: Any, kind: str) -> None:
        """Register an object that is routed before it owns a handle."""
        with self._lock:
            self._entries[token] = _Entry(kind, weakref.ref(obj), None, None)
        log.debug("Registered %s", kind, extra={"token": token})

    def attach(
        self,
        token: int,
        obj: Any,
        kind: str,
        create: Callable[[], int | None],
        deleter: Deleter,
    ) -> NativeHandle:
        """Create the native object and register its owner in one step.

        Args:
            token: The owner's token, already written into its callback table.
            obj: The owner.
            kind: Entity kind.
            create: Engine create call returning a pointer or None.
            deleter: Engine delete call for that pointer.

        Returns:
            The owned handle.

        Raises:
            NullHandleError: If ``create`` returned null. Nothing is registered.
        """
        with self._lock:
            ptr = create()
            handle = NativeHandle.owned_by_host(ptr, kind, deleter)
            self._entries[token] = _Entry(kind, weakref.ref(obj), handle, ptr)
            self._by_ptr[ptr] = token
        log.debug("Attached %s", kind, extra={"token": token})
        return handle

    def bind_ptr(self, token: int, ptr: int | None) -> None:
        """Index an engine-supplied pointer for an already registered token."""
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return
            if entry.ptr is not None:
                self._by_ptr.pop(entry.ptr, None)
            entry.ptr = ptr or None
            if entry.ptr is not None:
                self._by_ptr[entry.ptr] = token

    def detach(self, token: int, teardown: Callable[[], None] | None = None) -> bool:
        """Deregister ``token`` and run ``teardown`` under the same lock.

        ``teardown`` runs even if the token is no longer registered, so a
        finalizer can always release what its object owned.

        Returns:
            True if an entry was removed.
        """
        with self._lock:
            entry = self._entries.pop(token, None)
            if entry is not None and entry.ptr is not None:
                self._by_ptr.pop(entry.ptr, None)
            if teardown is not None:
                teardown()
        if entry is not None:
            log.debug("Detached %s", entry.kind, extra={"token": token})
        return entry is not None

    def clear(self) -> None:
        """Forget every entry after the engine has released all objects."""
        with self._lock:
            for entry in self._entries.values():
                if entry.handle is not None:
                    entry.handle.invalidate()
            self._entries.clear()
            self._by_ptr.clear()

    # =========================================================================
    # Lookup
    # =========================================================================

    def lookup(self, token: int | None, ptr: int | None = None) -> Any | None:
        """Resolve a callback's owner.

        Args:
            token: The ``user_data`` value the engine passed back.
            ptr: The object pointer the engine passed, used when ``token``
                is missing or unknown.

        Returns:
            The live owner, or None if it was torn down or never registered.
        """
        with self._lock:
            entry = self._entries.get(token) if token else None
            if entry is None and ptr:
                by_ptr = self._by_ptr.get(ptr)
                entry = self._entries.get(by_ptr) if by_ptr is not None else None
            if entry is None:
                return None
            return entry.ref()

    def live(self, kind: str | None = None) -> list[Any]:
        """Snapshot of registered objects, optionally filtered by kind."""
        with self._lock:
            entries = list(self._entries.values())
        objects = []
        for entry in entries:
            if kind is not None and entry.kind != kind:
                continue
            obj = entry.ref()
            if obj is not None:
                objects.append(obj)
        return objects
