"""Time sources for the timer engine.

A clock supplies two things:

``now()``
    Monotonic seconds as a float.  Only differences matter.
``call_later(delay, callback)``
    Run *callback* once after *delay* seconds.  Returns a handle whose
    ``cancel()`` guarantees the callback will not run.

``QtClock`` is the production clock and needs a running Qt event loop.
``ManualClock`` is virtual time for tests: nothing happens until
``advance()`` is called, and then every due callback runs in order on the
caller's thread.
"""

from __future__ import annotations

import heapq
import itertools
import math
import time
from typing import Callable, Protocol

from PyQt6.QtCore import QDateTime, QObject, Qt, QTimer


class CallHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> CallHandle: ...


# ═══════════════════════════════════════════════════════════════════════════
#  REAL TIME
# ═══════════════════════════════════════════════════════════════════════════


class _QtCallHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class _WallClockSource:
    """Seconds from the system clock, which keeps counting through suspend.

    A backwards step of the wall clock (NTP, a manual change) is absorbed
    into an offset, so readings never decrease.
    """

    def __init__(self, read: Callable[[], int] = QDateTime.currentMSecsSinceEpoch) -> None:
        self._read = read
        self._last = read()
        self._offset = 0

    def __call__(self) -> float:
        raw = self._read()
        if raw < self._last:
            self._offset += self._last - raw
        self._last = raw
        return (raw + self._offset) / 1000.0


def _boottime() -> float:
    return time.clock_gettime(time.CLOCK_BOOTTIME)


def default_source() -> Callable[[], float]:
    """A seconds counter that includes time spent in system suspend."""
    if hasattr(time, "CLOCK_BOOTTIME"):
        return _boottime
    return _WallClockSource()


class QtClock(QObject):
    """Real time driven by the Qt event loop.

    ``now()`` counts time the machine spent asleep, so the first wake-up
    after a suspend sees every second that passed.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        source: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(parent)
        self._source = source if source is not None else default_source()
        self._origin = self._source()

    def now(self) -> float:
        return self._source() - self._origin

    def call_later(self, delay: float, callback: Callable[[], None]) -> _QtCallHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        # Coarse timers may fire up to 5% early.
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        handle = _QtCallHandle(timer)

        def fire() -> None:
            handle.cancel()
            callback()

        timer.timeout.connect(fire)
        timer.start(max(0, math.ceil(delay * 1000)))
        return handle


# ═══════════════════════════════════════════════════════════════════════════
#  VIRTUAL TIME
# ═══════════════════════════════════════════════════════════════════════════


class _ScheduledCall:
    __slots__ = ("when", "seq", "callback", "cancelled")

    def __init__(self, when: float, seq: int, callback: Callable[[], None]) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: _ScheduledCall) -> bool:
        return (self.when, self.seq) < (other.when, other.seq)


class ManualClock:
    """Advanceable clock for deterministic tests."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: list[_ScheduledCall] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ScheduledCall:
        call = _ScheduledCall(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have neither run nor been cancelled."""
        return sum(1 for call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> None:
        """Move time forward, running each callback at its due time.

        Callbacks scheduled by other callbacks run too if they fall due
        before the target time.
        """
        if seconds < 0:
            raise ValueError("cannot move time backwards")
        target = self._now + seconds
        while self._queue and self._queue[0].when <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            call.cancelled = True
            self._now = max(self._now, call.when)
            call.callback()
        self._now = target

    def jump(self, seconds: float) -> None:
        """Move time forward without running anything.

        Simulates a process that was suspended (device sleep): overdue
        callbacks fire late, on the next ``advance()``.
        """
        if seconds < 0:
            raise ValueError("cannot move time backwards")
        self._now += seconds
