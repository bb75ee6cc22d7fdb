"""Background refresh scheduling.

A single repeating timer per session calls the refresh-if-needed decision every
REFRESH_INTERVAL. The timer handle is stored on the SessionState, so "running"
means exactly "SessionState.timer_handle is not None".
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Any, Callable, Optional

from .session_state import SessionState


REFRESH_INTERVAL = timedelta(seconds=10)
MAX_CONSECUTIVE_FAILURES = 3

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], Any]


class RepeatingTimer:
    """Daemon thread calling `function` every `interval` seconds until cancelled.

    The first call happens one full interval after start().
    """

    def __init__(self, interval: float, function: Callable[[], None]) -> None:
        self.interval = interval
        self.function = function
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="sdk-session-refresh", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._stop.set()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.function()


class RefreshScheduler:
    def __init__(
        self,
        state: SessionState,
        on_tick: Callable[[], None],
        *,
        interval: timedelta = REFRESH_INTERVAL,
        timer_factory: TimerFactory = RepeatingTimer,
        max_consecutive_failures: Optional[int] = MAX_CONSECUTIVE_FAILURES,
    ) -> None:
        self._state = state
        self._on_tick = on_tick
        self._interval = interval
        self._timer_factory = timer_factory
        self._max_failures = max_consecutive_failures
        self._failures = 0
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._state.timer_handle is not None

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    def start(self) -> None:
        with self._lock:
            if self._state.timer_handle is not None:
                return
            self._failures = 0
            timer = self._timer_factory(self._interval.total_seconds(), self._tick)
            self._state.timer_handle = timer
            timer.start()
        logger.debug("refresh scheduler started (interval=%ss)", self._interval.total_seconds())

    def stop(self) -> None:
        with self._lock:
            timer = self._state.timer_handle
            if timer is None:
                return
            self._state.timer_handle = None
            timer.cancel()
        logger.debug("refresh scheduler stopped")

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0

    def record_failure(self) -> None:
        """Count a failed background refresh; stop once the bound is reached."""

        with self._lock:
            self._failures += 1
            failures = self._failures
        if self._max_failures is None or failures < self._max_failures:
            return
        logger.warning(
            "background refresh failed %d times in a row, stopping scheduler",
            failures,
        )
        self.stop()

    def _tick(self) -> None:
        try:
            self._on_tick()
        except Exception:  # noqa: BLE001
            logger.exception("refresh tick failed")


__all__ = [
    "REFRESH_INTERVAL",
    "MAX_CONSECUTIVE_FAILURES",
    "RepeatingTimer",
    "RefreshScheduler",
]
