"""Scheduler backed by the Qt event loop."""

from __future__ import annotations

import time
from typing import Optional

from PySide6.QtCore import QObject, Qt, QTimer

from pulsearcade.core.scheduler import Callback, Scheduler, TimerHandle


class QtTimerHandle(TimerHandle):
    """TimerHandle owning one QTimer; the timer is deleted once, on fire or cancel."""

    def __init__(self, callback: Callback, timer: QTimer, interval: Optional[float] = None) -> None:
        super().__init__(callback, interval=interval)
        self._timer: Optional[QTimer] = timer
        timer.timeout.connect(self._on_timeout)

    def cancel(self) -> None:
        super().cancel()
        self._release()

    def start(self) -> None:
        if self._timer is not None:
            self._timer.start()

    def _on_timeout(self) -> None:
        if not self.repeating:
            self._release()
        self.fire()

    def _release(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()


class QtScheduler(Scheduler):
    """``now()`` is ``time.monotonic``; timers are precise QTimers parented to ``owner``."""

    def __init__(self, owner: QObject) -> None:
        self._owner = owner

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = QtTimerHandle(callback, self._make_timer(delay, single_shot=True))
        handle.start()
        return handle

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = QtTimerHandle(callback, self._make_timer(interval, single_shot=False), interval=interval)
        handle.start()
        return handle

    def _make_timer(self, seconds: float, single_shot: bool) -> QTimer:
        timer = QTimer(self._owner)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setSingleShot(single_shot)
        timer.setInterval(max(0, int(round(seconds * 1000))))
        return timer
