"""Periodic refresh timer owned by the sync manager."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Invoke a callback every ``interval_minutes`` on a background thread.

    The scheduler owns its timer: ``start()`` arms it, ``stop()`` disarms it
    and ``reset()`` re-arms it, optionally with a new interval. The first
    scheduled run happens one full interval after ``start()``; call
    ``trigger()`` for an immediate, on-demand run.

    Exceptions raised by the callback are logged and the timer keeps running.
    """

    def __init__(self, callback: Callable[[], object], interval_minutes: float = 5):
        if interval_minutes <= 0:
            raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
        self.callback = callback
        self.interval_minutes = interval_minutes

        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Arm the timer. Does nothing if it is already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop_event, self.interval_seconds),
                name="trellocards-refresh",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
        logger.debug(f"Refresh timer started ({self.interval_minutes} min)")
        thread.start()

    def stop(self) -> None:
        """Disarm the timer. Safe to call when not running."""
        with self._lock:
            stop_event, thread = self._stop_event, self._thread
            self._stop_event = None
            self._thread = None
        if stop_event is None or thread is None:
            return
        stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout=5.0)
        logger.debug("Refresh timer stopped")

    def reset(self, interval_minutes: float | None = None) -> None:
        """Stop the timer and start it again, optionally with a new interval"""
        if interval_minutes is not None:
            if interval_minutes <= 0:
                raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
            self.interval_minutes = interval_minutes
        self.stop()
        self.start()

    def trigger(self) -> None:
        """Run the callback now on the calling thread"""
        self._invoke()

    def _invoke(self) -> None:
        try:
            self.callback()
        except Exception:
            logger.exception("Scheduled refresh failed")

    def _run(self, stop_event: threading.Event, interval_seconds: float) -> None:
        while not stop_event.wait(interval_seconds):
            self._invoke()
