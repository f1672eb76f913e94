from __future__ import annotations

import heapq
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Game logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


@dataclass(slots=True)
class TimerHandle:
    """Handle for a scheduled single-shot callback."""

    due_at_s: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    label: str = ""
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True


class TimerQueue:
    """Deferred single-shot callbacks driven by an injected Clock.

    Nothing runs on its own: the host calls ``update()`` (once per frame in the
    pygame shell, explicitly in tests) and every due callback fires on that
    caller's thread, in due-time order, ties broken by scheduling order.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def schedule(self, delay_s: float, callback: Callable[[], None], *, label: str = "") -> TimerHandle:
        if delay_s < 0.0:
            raise ValueError("delay_s must be >= 0")
        seq = next(self._seq)
        handle = TimerHandle(
            due_at_s=self._clock.now() + float(delay_s),
            seq=seq,
            callback=callback,
            label=label,
        )
        heapq.heappush(self._heap, (handle.due_at_s, seq, handle))
        return handle

    def update(self) -> int:
        """Fire every callback that is due. Returns how many fired."""

        fired = 0
        now = self._clock.now()
        while self._heap and self._heap[0][0] <= now:
            _, _, handle = heapq.heappop(self._heap)
            if not handle.pending:
                continue
            handle.fired = True
            handle.callback()
            fired += 1
        return fired
