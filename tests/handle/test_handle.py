"""
Tests for NativeHandle.

Tests that:
1. Null pointers are rejected at construction
2. Owned handles are deleted exactly once, borrowed ones never
3. Copies are independent owned handles
4. Shared ownership defers deletion to the last release
"""

import threading

import pytest

from opentok_native.exceptions import FatalError, NullHandleError
from opentok_native.handle import NativeHandle


class Deleter:
    """Records delete calls and returns a fixed status."""

    def __init__(self, status=0):
        self.status = status
        self.deleted = []

    def __call__(self, ptr):
        self.deleted.append(ptr)
        return self.status


class TestConstruction:
    """Tests for owned and borrowed construction."""

    @pytest.mark.parametrize("ptr", [None, 0])
    def test_null_rejected(self, ptr):
        """A null pointer raises NullHandleError."""
        with pytest.raises(NullHandleError) as exc_info:
            NativeHandle.owned_by_host(ptr, "session", Deleter())

        assert exc_info.value.details == {"kind": "session"}

    def test_borrowed_null_rejected(self):
        """Borrowed handles reject null too."""
        with pytest.raises(NullHandleError):
            NativeHandle.borrowed(None, "stream")

    def test_ptr_readable(self):
        """ptr returns the wrapped value while live."""
        handle = NativeHandle.borrowed(0x10, "stream")

        assert handle.ptr == 0x10
        assert not handle.is_null
        assert not handle.owned


class TestDelete:
    """Tests for request_delete()."""

    def test_deleted_once(self):
        """Repeated delete requests reach the engine once."""
        deleter = Deleter()
        handle = NativeHandle.owned_by_host(0x10, "session", deleter)

        handle.request_delete()
        handle.request_delete()

        assert deleter.deleted == [0x10]
        assert handle.is_null

    def test_ptr_after_delete_raises(self):
        """Reading a deleted handle raises instead of returning a stale pointer."""
        handle = NativeHandle.owned_by_host(0x10, "publisher", Deleter())
        handle.request_delete()

        with pytest.raises(NullHandleError):
            _ = handle.ptr

    def test_borrowed_never_deleted(self):
        """A borrowed handle only tombstones."""
        handle = NativeHandle(0x10, "stream", owned=False, deleter=Deleter())

        handle.request_delete()

        assert handle._deleter.deleted == []
        assert handle.is_null

    def test_delete_failure_raises_after_tombstone(self):
        """A failing delete raises, and the handle stays deleted."""
        handle = NativeHandle.owned_by_host(0x10, "session", Deleter(status=2))

        with pytest.raises(FatalError):
            handle.request_delete()

        assert handle.is_null
        handle.request_delete()

    def test_concurrent_delete(self):
        """Racing delete requests delete once."""
        deleter = Deleter()
        handle = NativeHandle.owned_by_host(0x10, "session", deleter)
        barrier = threading.Barrier(8)

        def delete():
            barrier.wait()
            handle.request_delete()

        threads = [threading.Thread(target=delete) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert deleter.deleted == [0x10]

    def test_invalidate_skips_deleter(self):
        """invalidate() tombstones without calling the engine."""
        deleter = Deleter()
        handle = NativeHandle.owned_by_host(0x10, "session", deleter)

        handle.invalidate()
        handle.request_delete()

        assert deleter.deleted == []


class TestCopy:
    """Tests for copy()."""

    def test_copy_is_owned(self):
        """Copying a borrowed handle yields an independent owned handle."""
        deleter = Deleter()
        borrowed = NativeHandle.borrowed(0x10, "stream")

        copy = borrowed.copy(lambda ptr: ptr + 0x100, deleter)
        borrowed.request_delete()

        assert copy.owned
        assert copy.ptr == 0x110
        copy.request_delete()
        assert deleter.deleted == [0x110]

    def test_null_copy(self):
        """A copy primitive returning null raises NullHandleError."""
        borrowed = NativeHandle.borrowed(0x10, "connection")

        with pytest.raises(NullHandleError):
            borrowed.copy(lambda ptr: None, Deleter())

    def test_copy_of_deleted(self):
        """A deleted handle cannot be copied."""
        borrowed = NativeHandle.borrowed(0x10, "connection")
        borrowed.request_delete()

        with pytest.raises(NullHandleError):
            borrowed.copy(lambda ptr: ptr, Deleter())


class TestSharedOwnership:
    """Tests for retain() / release()."""

    def test_last_release_deletes(self):
        """Deletion waits for the last owner."""
        deleter = Deleter()
        handle = NativeHandle.owned_by_host(0x10, "session", deleter)
        handle.retain()

        handle.release()
        assert deleter.deleted == []

        handle.release()
        assert deleter.deleted == [0x10]

    def test_retain_after_delete(self):
        """A deleted handle cannot gain owners."""
        handle = NativeHandle.owned_by_host(0x10, "session", Deleter())
        handle.request_delete()

        with pytest.raises(NullHandleError):
            handle.retain()

    def test_release_after_delete_is_noop(self):
        """Releasing a deleted handle does nothing."""
        deleter = Deleter()
        handle = NativeHandle.owned_by_host(0x10, "session", deleter)
        handle.request_delete()

        handle.release()

        assert deleter.deleted == [0x10]
