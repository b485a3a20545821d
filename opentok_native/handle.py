"""
Opaque native handles.

A :class:`NativeHandle` wraps one engine pointer. Application code never
sees the pointer itself; wrappers read it through :attr:`NativeHandle.ptr`
for the duration of one engine call.

Two variants mirror the engine's own reference model:

- *owned*: the host must eventually call the engine's ``*_delete`` on it.
  :meth:`NativeHandle.request_delete` does so at most once, and only when
  the last owner has released it.
- *borrowed*: valid only for the callback that supplied it. Retaining it
  requires :meth:`NativeHandle.copy`, which calls the engine's ``*_copy``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from ._bindings import check
from .exceptions import NullHandleError

__all__ = ["NativeHandle"]

Deleter = Callable[[int], int | None]
Copier = Callable[[int], int | None]


class NativeHandle:
    """
    One opaque engine pointer with delete-once semantics.

    Attributes
    ----------
    kind : str
        Entity kind ("session", "stream", ...), used in error details.
    owned : bool
        Whether this handle is responsible for requesting deletion.
    """

    __slots__ = ("kind", "owned", "_ptr", "_deleter", "_owners", "_lock")

    def __init__(
        self,
        ptr: int | None,
        kind: str,
        owned: bool,
        deleter: Deleter | None = None,
    ):
        if not ptr:
            raise NullHandleError(f"Null {kind} handle", details={"kind": kind})
        self.kind = kind
        self.owned = owned
        self._ptr: int | None = ptr
        self._deleter = deleter
        self._owners = 1
        self._lock = threading.Lock()

    @classmethod
    def owned_by_host(cls, ptr: int | None, kind: str, deleter: Deleter) -> NativeHandle:
        """Wrap a pointer the host must delete."""
        return cls(ptr, kind, owned=True, deleter=deleter)

    @classmethod
    def borrowed(cls, ptr: int | None, kind: str) -> NativeHandle:
        """Wrap a pointer that stays engine-owned."""
        return cls(ptr, kind, owned=False)

    def __repr__(self) -> str:
        state = "deleted" if self._ptr is None else "live"
        variant = "owned" if self.owned else "borrowed"
        return f"NativeHandle({self.kind!r}, {variant}, {state})"

    @property
    def ptr(self) -> int:
        """The raw pointer value.

        Raises:
            NullHandleError: If the handle was deleted.
        """
        ptr = self._ptr
        if ptr is None:
            raise NullHandleError(
                f"{self.kind} handle was already deleted", details={"kind": self.kind}
            )
        return ptr

    @property
    def is_null(self) -> bool:
        """True once the handle has been deleted (or released, if borrowed)."""
        return self._ptr is None

    def copy(self, copier: Copier, deleter: Deleter) -> NativeHandle:
        """Take ownership of an independent engine copy of this pointer.

        Args:
            copier: The engine's ``*_copy`` function.
            deleter: The engine's ``*_delete`` function for the copy.

        Raises:
            NullHandleError: If this handle is deleted or the copy is null.
        """
        return NativeHandle.owned_by_host(copier(self.ptr), self.kind, deleter)

    def retain(self) -> NativeHandle:
        """Register one more owner; each needs a matching :meth:`release`."""
        with self._lock:
            if self._ptr is None:
                raise NullHandleError(
                    f"{self.kind} handle was already deleted", details={"kind": self.kind}
                )
            self._owners += 1
        return self

    def release(self) -> None:
        """Drop one owner; the last one requests deletion."""
        with self._lock:
            if self._ptr is None:
                return
            self._owners -= 1
            if self._owners > 0:
                return
        self.request_delete()

    def invalidate(self) -> None:
        """Tombstone without deleting, for pointers the engine already freed."""
        with self._lock:
            self._ptr = None
            self._owners = 0

    def request_delete(self) -> None:
        """Delete the pointer. Repeat calls are no-ops.

        The pointer is tombstoned before the deleter runs, so a concurrent
        or re-entrant call never deletes twice.
        """
        with self._lock:
            ptr = self._ptr
            if ptr is None:
                return
            self._ptr = None
            self._owners = 0
        if self.owned and self._deleter is not None:
            status = self._deleter(ptr)
            if status is not None:
                check(status, {"operation": f"{self.kind}_delete"})
