"""
Engine context.

An :class:`Engine` is one loaded OpenTok library together with the state
the host keeps for it: the instance registry, the callback dispatcher, and
the audio device. Nothing about the engine lives in module globals except
the optional default engine used when objects are created without an
explicit ``engine=``.

Tests create engines over a fake library::

    >>> engine = Engine(lib=FakeEngine())
    >>> engine.init()
    >>> session = Session(api_key, session_id, engine=engine)
"""

from __future__ import annotations

import threading
from typing import Any

from ._bindings import check, get_lib
from ._dispatch import Dispatcher
from ._logging import scoped_logger
from .exceptions import (
    AlreadyInitializedError,
    InitializationError,
    OpenTokError,
    error_for_status,
)
from .media.audio_device import AudioDevice
from .registry import InstanceRegistry

__all__ = ["Engine", "init", "deinit", "get_engine"]

log = scoped_logger("engine")


class Engine:
    """
    One OpenTok engine and its host-side routing state.

    Args:
        lib: Object exposing the ``otc_*`` functions. Defaults to the SDK
            shared library found by :func:`opentok_native._bindings.get_lib`.

    Raises:
        InitializationError: If ``lib`` is omitted and the SDK cannot be loaded.
    """

    def __init__(self, lib: Any = None):
        self.lib = lib if lib is not None else get_lib()
        self.registry = InstanceRegistry()
        self.dispatcher = Dispatcher(self.lib, self.registry)
        self.audio_device: AudioDevice | None = None
        self._initialized = False
        self._lock = threading.Lock()
        # Engine log forwarding trampoline, see log.enable_engine_log
        self._log_callback: Any = None

    def __repr__(self) -> str:
        state = "initialized" if self._initialized else "uninitialized"
        return f"Engine({state}, objects={len(self.registry)})"

    def __enter__(self) -> Engine:
        self.init()
        return self

    def __exit__(self, *_: object) -> None:
        if self._initialized:
            self.deinit()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Initialize the engine and install the audio device.

        Raises:
            AlreadyInitializedError: If already initialized.
            InitializationError: If ``otc_init`` fails.
        """
        with self._lock:
            if self._initialized:
                raise AlreadyInitializedError("Engine is already initialized")
            status = self.lib.otc_init(None)
            error = error_for_status(status, {"operation": "otc_init"})
            if error is not None:
                raise InitializationError(
                    f"Engine initialization failed: {error}",
                    details={"operation": "otc_init"},
                    original_code=status,
                ) from error
            self._initialized = True
        self.audio_device = AudioDevice(self)
        log.info("Engine initialized")

    def deinit(self) -> None:
        """Release every live object, then the engine.

        Order: stop the audio device, unpublish every publisher, unsubscribe
        every subscriber, disconnect every session, ``otc_destroy``. Failures
        of the individual requests are logged; only ``otc_destroy`` raises.

        Raises:
            InitializationError: If the engine is not initialized.
            OpenTokError: If ``otc_destroy`` fails.
        """
        with self._lock:
            if not self._initialized:
                raise InitializationError("Engine is not initialized")
            self._initialized = False

        if self.audio_device is not None:
            self.audio_device.stop()
        for publisher in self.registry.live("publisher"):
            self._release(publisher.unpublish, publisher)
        for subscriber in self.registry.live("subscriber"):
            self._release(subscriber.unsubscribe, subscriber)
        for session in self.registry.live("session"):
            if session.is_alive:
                self._release(session.disconnect, session)

        try:
            check(self.lib.otc_destroy(), {"operation": "otc_destroy"})
        finally:
            # Handles die with the engine; finalizers must not delete them again
            self.registry.clear()
            self.audio_device = None
            log.info("Engine destroyed")

    @staticmethod
    def _release(request: Any, obj: Any) -> None:
        try:
            request()
        except OpenTokError as e:
            log.warning("Release of %r failed: %s", obj, e, extra={"code": e.code})


# =============================================================================
# Default Engine
# =============================================================================

_default: Engine | None = None
_default_lock = threading.Lock()


def init(lib: Any = None) -> Engine:
    """Create and initialize the default engine.

    Args:
        lib: Library override, as for :class:`Engine`.

    Returns:
        The default engine.

    Raises:
        AlreadyInitializedError: If the default engine is already initialized.
        InitializationError: If the library cannot be loaded or initialized.
    """
    global _default
    with _default_lock:
        if _default is not None:
            raise AlreadyInitializedError("opentok_native is already initialized")
        engine = Engine(lib)
        engine.init()
        _default = engine
        return engine


def deinit() -> None:
    """Deinitialize and forget the default engine.

    Raises:
        InitializationError: If :func:`init` was not called.
        OpenTokError: If the engine fails to shut down.
    """
    global _default
    with _default_lock:
        engine = _default
        if engine is None:
            raise InitializationError("opentok_native is not initialized")
        _default = None
    engine.deinit()


def get_engine() -> Engine:
    """The default engine.

    Raises:
        InitializationError: If :func:`init` was not called.
    """
    engine = _default
    if engine is None:
        raise InitializationError(
            "opentok_native is not initialized; call opentok_native.init() "
            "or pass engine="
        )
    return engine
