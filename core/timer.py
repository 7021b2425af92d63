"""Countdown clock for exam sessions."""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from core.errors import ValidationError

logger = logging.getLogger(__name__)


class CountdownTimer:
    """
    Whole-second countdown.

    The timer holds no thread of its own; something calls ``tick()`` once per
    elapsed second (the session's clock thread, or a test). ``tick()`` returns
    True on exactly one call: the one that brings the counter to zero.
    """

    def __init__(self, total_seconds: int):
        if not isinstance(total_seconds, int) or total_seconds <= 0:
            raise ValidationError(
                f"Timer needs a positive number of seconds, got {total_seconds!r}"
            )
        self._remaining = total_seconds
        self._expired = False
        self._cancelled = False

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def running(self) -> bool:
        return not (self._expired or self._cancelled)

    def tick(self) -> bool:
        """Consume one second. Returns True if this tick expired the timer."""
        if not self.running:
            return False
        self._remaining -= 1
        if self._remaining > 0:
            return False
        self._remaining = 0
        self._expired = True
        return True

    def cancel(self) -> None:
        self._cancelled = True

    def zero(self) -> None:
        """Drop the remaining time without signalling expiry."""
        self._remaining = 0
        self._cancelled = True


class ClockThread:
    """
    Daemon thread that calls ``tick`` once per ``interval`` seconds.

    Ticks are issued one at a time from a single thread, so a tick always
    completes before the next one starts. The loop ends when ``tick`` returns
    False or ``stop()`` is called. Deadlines are computed from a monotonic
    clock so a slow tick does not push later ticks back.
    """

    def __init__(
        self,
        tick: Callable[[], bool],
        interval: float = 1.0,
        name: str = "exam_clock",
    ):
        self._tick = tick
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _run(self) -> None:
        deadline = time.monotonic() + self._interval
        while not self._stop_event.wait(max(0.0, deadline - time.monotonic())):
            deadline += self._interval
            try:
                keep_running = self._tick()
            except Exception:
                logger.exception("Clock tick failed; stopping clock")
                return
            if not keep_running:
                return
