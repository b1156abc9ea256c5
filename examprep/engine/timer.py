"""Countdown timer that fires an expiry callback once."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class TimerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class CountdownTimer:
    """
    Counts down whole seconds from a fixed duration.

    Ticks come either from a background daemon thread (one per ``interval``)
    or from an external loop calling ``tick()``. Callbacks always run outside
    the timer's lock. Once stopped, by expiry or by ``stop()``, the timer
    never fires again and cannot be restarted.
    """

    def __init__(
        self,
        duration_seconds: int,
        on_expire: Callable[[], None],
        on_tick: Callable[[int], None] | None = None,
        interval: float = 1.0,
    ) -> None:
        if duration_seconds < 0:
            raise ValueError("duration_seconds must be >= 0")
        self._remaining = int(duration_seconds)
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._interval = interval
        self._state = TimerState.IDLE
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state == TimerState.RUNNING

    def start(self, run_thread: bool = True) -> bool:
        """Start counting. Returns False if the timer was already used."""
        with self._lock:
            if self._state != TimerState.IDLE:
                return False
            self._state = TimerState.RUNNING
            expired = self._remaining == 0
            if expired:
                self._state = TimerState.STOPPED
        if expired:
            self._on_expire()
            return True
        if run_thread:
            self._thread = threading.Thread(
                target=self._worker,
                name="attempt_timer",
                daemon=True,
            )
            self._thread.start()
        return True

    def stop(self) -> None:
        with self._lock:
            self._state = TimerState.STOPPED
        self._stop_event.set()

    def tick(self) -> int:
        """Advance one second and return the remaining time."""
        with self._lock:
            if self._state != TimerState.RUNNING:
                return self._remaining
            self._remaining = max(self._remaining - 1, 0)
            remaining = self._remaining
            expired = remaining == 0
            if expired:
                self._state = TimerState.STOPPED
                self._stop_event.set()
        if self._on_tick is not None:
            self._on_tick(remaining)
        if expired:
            logger.debug("Timer expired")
            self._on_expire()
        return remaining

    def _worker(self) -> None:
        while not self._stop_event.wait(self._interval):
            self.tick()
