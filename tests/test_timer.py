import threading

import pytest

from core.errors import ValidationError
from core.timer import ClockThread, CountdownTimer


def test_timer_expires_on_last_tick_only() -> None:
    timer = CountdownTimer(3)
    assert [timer.tick() for _ in range(3)] == [False, False, True]
    assert timer.remaining_seconds == 0
    assert timer.expired
    assert not timer.running


def test_ticks_after_expiry_are_noops() -> None:
    timer = CountdownTimer(1)
    assert timer.tick()
    assert not timer.tick()
    assert timer.remaining_seconds == 0


def test_cancelled_timer_keeps_remaining_time() -> None:
    timer = CountdownTimer(10)
    timer.tick()
    timer.cancel()
    assert not timer.tick()
    assert timer.remaining_seconds == 9
    assert timer.cancelled
    assert not timer.expired


def test_zero_drops_time_without_expiring() -> None:
    timer = CountdownTimer(10)
    timer.zero()
    assert timer.remaining_seconds == 0
    assert not timer.expired
    assert not timer.running


@pytest.mark.parametrize("seconds", [0, -5, 1.5, None])
def test_timer_rejects_non_positive_duration(seconds: object) -> None:
    with pytest.raises(ValidationError):
        CountdownTimer(seconds)


def test_clock_thread_stops_when_tick_returns_false() -> None:
    calls = []
    done = threading.Event()

    def tick() -> bool:
        calls.append(1)
        if len(calls) == 3:
            done.set()
            return False
        return True

    clock = ClockThread(tick, interval=0.01)
    clock.start()
    assert done.wait(5)
    clock.stop(timeout=5)
    assert len(calls) == 3
    assert not clock.alive


def test_clock_thread_stop_ends_loop() -> None:
    started = threading.Event()

    def tick() -> bool:
        started.set()
        return True

    clock = ClockThread(tick, interval=0.01)
    clock.start()
    assert started.wait(5)
    clock.stop(timeout=5)
    assert not clock.alive


def test_clock_thread_stops_on_failing_tick() -> None:
    def tick() -> bool:
        raise RuntimeError("boom")

    clock = ClockThread(tick, interval=0.01)
    clock.start()
    clock._thread.join(5)
    assert not clock.alive
