"""Deferred callbacks for a single-threaded event loop.

The host pumps ``run_due()`` once per frame; tests drive a ``ManualClock``.
"""

from __future__ import annotations
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .logging import now


@dataclass(order=True)
class TimerHandle:
    """A pending deferred callback."""
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class Scheduler:
    """Timer queue ordered by due time."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or now
        self._queue: List[TimerHandle] = []
        self._seq = itertools.count()

    def now(self) -> float:
        """Current time in seconds according to the scheduler's clock."""
        return self._clock()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once, no earlier than ``delay_s`` from now."""
        handle = TimerHandle(self._clock() + max(0.0, delay_s), next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` on the next pump."""
        return self.call_later(0.0, callback)

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks."""
        return sum(1 for h in self._queue if not h.cancelled)

    def run_due(self) -> int:
        """Run every callback that is due. Returns how many ran.

        Callbacks scheduled while running are left for the next pump.
        """
        t = self._clock()
        due: List[TimerHandle] = []
        while self._queue and self._queue[0].due <= t:
            due.append(heapq.heappop(self._queue))
        ran = 0
        for handle in due:
            if handle.cancelled:
                continue
            handle.cancelled = True
            handle.callback()
            ran += 1
        return ran
