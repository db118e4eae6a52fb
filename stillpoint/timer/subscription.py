"""Per-observer delivery of timer snapshots.

Each subscriber owns a bounded buffer.  The engine appends to it and never
waits for the consumer: when the buffer is full the oldest snapshot is
dropped, because keeping time outranks keeping the display fresh.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Callable, Iterator

from .state import TimerState

if TYPE_CHECKING:
    from .engine import TimerEngine

logger = logging.getLogger(__name__)

SUBSCRIPTION_BUFFER = 64


class Subscription:
    """A stream of ``TimerState`` snapshots from one engine.

    Read it by polling (``get_nowait``, ``drain``, ``latest``), by
    iterating over what is buffered, or by passing a *callback* that is
    invoked for every snapshot as it is published.

    Usable as a context manager; leaving the block unsubscribes.
    """

    def __init__(
        self,
        engine: TimerEngine,
        callback: Callable[[TimerState], None] | None = None,
        maxlen: int = SUBSCRIPTION_BUFFER,
    ) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be at least 1")
        self._engine: TimerEngine | None = engine
        self._callback = callback
        self._buffer: deque[TimerState] = deque(maxlen=maxlen)
        self._latest: TimerState | None = None
        self._seen = -1
        self.dropped = 0

    # ── consumer side ─────────────────────────────────────────────────

    @property
    def active(self) -> bool:
        return self._engine is not None

    @property
    def latest(self) -> TimerState | None:
        """Most recent snapshot delivered, whether or not it was read."""
        return self._latest

    def get_nowait(self) -> TimerState | None:
        """Pop the oldest unread snapshot, or ``None`` if there is none."""
        if not self._buffer:
            return None
        return self._buffer.popleft()

    def drain(self) -> list[TimerState]:
        items = list(self._buffer)
        self._buffer.clear()
        return items

    def __iter__(self) -> Iterator[TimerState]:
        return iter(self.drain())

    def __len__(self) -> int:
        return len(self._buffer)

    def close(self) -> None:
        if self._engine is not None:
            engine, self._engine = self._engine, None
            engine.unsubscribe(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── producer side ─────────────────────────────────────────────────

    def _detach(self) -> None:
        self._engine = None

    def _deliver(self, seq: int, state: TimerState) -> None:
        # A subscription made mid-publish already holds the newest snapshot.
        if self._engine is None or seq <= self._seen:
            return
        self._seen = seq
        if len(self._buffer) == self._buffer.maxlen:
            self.dropped += 1
        self._buffer.append(state)
        self._latest = state
        if self._callback is None:
            return
        try:
            self._callback(state)
        except Exception:
            logger.exception("Subscriber callback failed for %s", state)
