"""Connection value entity."""

from __future__ import annotations

from typing import Any

from .._bindings import from_c_string
from ..handle import NativeHandle

__all__ = ["Connection"]


class Connection:
    """
    A client's presence in a session.

    Built from a pointer borrowed during a callback: the pointer is copied
    with ``otc_connection_copy`` and every field is read into Python
    values at construction, so the object stays valid after the callback
    returns. The copy is deleted once, by :meth:`close` or garbage
    collection.

    Attributes
    ----------
    id : str
        Connection identifier.
    creation_time : int
        Creation timestamp, milliseconds since the Unix epoch.
    data : str | None
        Connection data set when the token was generated.
    session_id : str | None
        Identifier of the owning session.
    """

    __slots__ = ("id", "creation_time", "data", "session_id", "_handle")

    def __init__(self, lib: Any, handle: NativeHandle):
        ptr = handle.ptr
        self._handle = handle
        self.id = from_c_string(lib.otc_connection_get_id(ptr)) or ""
        self.creation_time = int(lib.otc_connection_get_creation_time(ptr))
        self.data = from_c_string(lib.otc_connection_get_data(ptr))
        self.session_id = from_c_string(lib.otc_connection_get_session_id(ptr))

    @classmethod
    def from_borrowed(cls, lib: Any, ptr: int | None) -> Connection:
        """Copy a callback-scoped connection pointer.

        Raises:
            NullHandleError: If ``ptr`` is null or the engine copy fails.
        """
        borrowed = NativeHandle.borrowed(ptr, "connection")
        return cls(lib, borrowed.copy(lib.otc_connection_copy, lib.otc_connection_delete))

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, session_id={self.session_id!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(("connection", self.id))

    @property
    def handle(self) -> NativeHandle:
        """The owned copy of the engine connection."""
        return self._handle

    def close(self) -> None:
        """Delete the engine copy. Idempotent; fields remain readable."""
        self._handle.request_delete()

    def __del__(self) -> None:
        """Release the engine copy on garbage collection."""
        if getattr(self, "_handle", None) is not None:
            self.close()
