"""
Fixed-cadence worker loop for custom media sources and sinks.

Audio rendering ticks every 10 ms; a video frame source ticks at the
capturer's frame rate. Both run on host-owned daemon threads until their
running flag is cleared.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from .._logging import scoped_logger

__all__ = ["CaptureLoop"]

log = scoped_logger("media")


class CaptureLoop:
    """
    Calls ``step`` every ``interval`` seconds on a background thread.

    The loop can be restarted after :meth:`stop`.

    Example:
        >>> loop = CaptureLoop("audio-render", 0.01, read_and_deliver)
        >>> loop.start()
        >>> loop.stop()
    """

    def __init__(self, name: str, interval: float, step: Callable[[], None]):
        self.name = name
        self.interval = interval
        self._step = step
        self._running = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def start(self) -> None:
        """Start the loop. No-op if it is already running."""
        with self._lock:
            if self._running.is_set():
                return
            self._running.set()
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()
        log.debug("Loop started", extra={"loop": self.name})

    def stop(self, timeout: float | None = 1.0) -> None:
        """Clear the running flag and wait for the current tick to finish.

        Safe to call from inside ``step``; the loop then exits after it.
        """
        with self._lock:
            self._running.clear()
            thread = self._thread
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        log.debug("Loop stopped", extra={"loop": self.name})

    def _run(self) -> None:
        next_tick = time.monotonic()
        while self._running.is_set():
            try:
                self._step()
            except Exception:
                log.error("Loop step failed", extra={"loop": self.name}, exc_info=True)
            next_tick += self.interval
            delay = next_tick - time.monotonic()
            if delay > 0:
                time.sleep(delay)
            else:
                # Fell behind; resynchronize instead of bursting
                next_tick = time.monotonic()
