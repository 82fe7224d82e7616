"""Timer sources that drive the game engines.

Engines never sleep or block. They ask a :class:`Scheduler` for one-shot
(``call_later``) or fixed-rate (``call_every``) callbacks and read the clock
through ``now()``. Every handle can be cancelled; a cancelled handle never
fires again.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class TimerHandle:
    def __init__(self, callback: Callback, interval: Optional[float] = None) -> None:
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """False once cancelled, or once a one-shot timer has fired."""
        return not (self._cancelled or self._fired)

    @property
    def repeating(self) -> bool:
        return self._interval is not None

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    def cancel(self) -> None:
        self._cancelled = True

    def fire(self) -> None:
        if not self.active:
            return
        if self._interval is None:
            self._fired = True
        self._callback()


class Scheduler:
    """Interface shared by the manual and the Qt scheduler."""

    def now(self) -> float:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        raise NotImplementedError

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        raise NotImplementedError


class ManualScheduler(Scheduler):
    """Virtual clock advanced explicitly by the caller.

    Due callbacks run in deadline order (ties in scheduling order), and a
    callback scheduled while advancing still runs in the same ``advance`` call
    if its deadline falls inside the window.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback)
        self._push(self._now + max(0.0, delay), handle)
        return handle

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(callback, interval=interval)
        self._push(self._now + interval, handle)
        return handle

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        deadline = self._now + seconds
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            if handle.interval is not None:
                self._push(due + handle.interval, handle)
            handle.fire()
        self._now = deadline

    def run_until_idle(self, limit: float = 600.0) -> None:
        """Advance until only repeating timers remain, or ``limit`` seconds pass."""
        end = self._now + limit
        while self._now < end:
            upcoming = [due for due, _, handle in self._queue if not handle.cancelled and not handle.repeating]
            if not upcoming:
                return
            self.advance(max(0.0, min(upcoming) - self._now))

    def _push(self, due: float, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (due, next(self._counter), handle))


class TimerGroup:
    """All timers owned by one engine, cancelled together on teardown."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._handles: List[TimerHandle] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def call_later(self, delay: float, callback: Callback) -> Optional[TimerHandle]:
        if self._closed:
            return None
        self._prune()
        handle = self._scheduler.call_later(delay, self._guard(callback))
        self._handles.append(handle)
        return handle

    def call_every(self, interval: float, callback: Callback) -> Optional[TimerHandle]:
        if self._closed:
            return None
        self._prune()
        handle = self._scheduler.call_every(interval, self._guard(callback))
        self._handles.append(handle)
        return handle

    def cancel_all(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles = []

    def close(self) -> None:
        self._closed = True
        self.cancel_all()

    def _guard(self, callback: Callback) -> Callback:
        def guarded() -> None:
            if not self._closed:
                callback()

        return guarded

    def _prune(self) -> None:
        self._handles = [handle for handle in self._handles if handle.active]

    @property
    def active_count(self) -> int:
        return sum(1 for handle in self._handles if handle.active)
