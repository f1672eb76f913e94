from __future__ import annotations

from dataclasses import dataclass

import pytest

from urinal_game.clock import TimerQueue


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def test_callbacks_fire_only_when_due_and_in_due_order() -> None:
    clock = FakeClock()
    timers = TimerQueue(clock)
    fired: list[str] = []

    late = timers.schedule(0.5, lambda: fired.append("late"))
    timers.schedule(0.2, lambda: fired.append("early"))

    assert timers.update() == 0
    clock.advance(0.25)
    assert timers.update() == 1
    assert fired == ["early"]

    clock.advance(0.5)
    timers.update()
    assert fired == ["early", "late"]
    assert late.fired is True


def test_equal_due_times_fire_in_scheduling_order() -> None:
    clock = FakeClock()
    timers = TimerQueue(clock)
    fired: list[int] = []
    for i in range(3):
        timers.schedule(0.1, lambda i=i: fired.append(i))

    clock.advance(1.0)
    timers.update()
    assert fired == [0, 1, 2]


def test_cancelled_callbacks_never_fire() -> None:
    clock = FakeClock()
    timers = TimerQueue(clock)
    fired: list[str] = []

    handle = timers.schedule(0.1, lambda: fired.append("x"))
    timers.schedule(0.1, lambda: fired.append("y"))
    handle.cancel()
    assert handle.pending is False

    clock.advance(1.0)
    assert timers.update() == 1
    assert fired == ["y"]


def test_zero_delay_fires_on_next_update_and_handle_reports_fired() -> None:
    clock = FakeClock()
    timers = TimerQueue(clock)
    fired: list[str] = []

    handle = timers.schedule(0.0, lambda: fired.append("now"))
    assert fired == []
    timers.update()
    assert fired == ["now"]
    assert handle.fired is True
    assert handle.pending is False


def test_negative_delay_is_rejected() -> None:
    timers = TimerQueue(FakeClock())
    with pytest.raises(ValueError):
        timers.schedule(-0.1, lambda: None)
