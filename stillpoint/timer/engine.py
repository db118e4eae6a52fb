"""Countdown state machine for Stillpoint.

States
------
IDLE        Full duration on the clock, waiting for ``start``.
RUNNING     Counting down one second at a time.
PAUSED      Frozen mid-session; ``resume`` picks up where it stopped.
COMPLETED   Reached 00:00.  ``reset`` or ``set_duration`` to go again.

Transitions
-----------
IDLE | PAUSED | COMPLETED → IDLE     (set_duration)
IDLE | PAUSED → RUNNING              (start / resume)
RUNNING → PAUSED                     (pause)
RUNNING → COMPLETED                  (last tick)
Any → IDLE                           (reset)

Every change is written to the state store *before* it is published, so
no observer ever sees a snapshot that a crash could roll back to a larger
remaining time.

The engine is single-threaded: commands and ticks must all run on the
thread that owns it (the Qt event-loop thread, or the test thread driving
a ``ManualClock``).  That thread is the serialization point; there is no
lock because nothing else may touch the state.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from ..errors import InvalidArgumentError, InvalidStateError, PersistenceError
from ..persistence.store import MemoryStateStore, StateStore
from .clock import CallHandle, Clock, QtClock
from .persistence import TimerPersistence
from .state import TimerPhase, TimerState
from .subscription import SUBSCRIPTION_BUFFER, Subscription

logger = logging.getLogger(__name__)


class TimerEngine(QObject):
    """Restartable meditation countdown.

    Signals
    -------
    state_changed(state: TimerState)
        Every snapshot, in the order produced.
    tick(remaining_seconds: int)
        Once per one-second decrement.
    completed(state: TimerState)
        When the countdown reaches zero.
    persistence_failed(message: str)
        The store rejected a write.  The session keeps running in memory
        and the write is retried on the next change.
    """

    state_changed = pyqtSignal(object)
    tick = pyqtSignal(int)
    completed = pyqtSignal(object)
    persistence_failed = pyqtSignal(str)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock | None = None,
        store: StateStore | None = None,
    ) -> None:
        super().__init__(parent)

        self._clock: Clock = clock if clock is not None else QtClock(self)
        self._persistence = TimerPersistence(
            store if store is not None else MemoryStateStore()
        )
        self._subscriptions: list[Subscription] = []
        self._outbox: deque[tuple[int, TimerState, bool, bool]] = deque()
        self._seq: int = 0  # bumped on every commit
        self._publishing: bool = False

        # ── tick loop ─────────────────────────────────────────────────
        self._tick_handle: CallHandle | None = None
        self._generation: int = 0  # bumped on every schedule/cancel
        self._anchor: float = 0.0
        self._ticks_applied: int = 0

        self._state: TimerState = self._persistence.load()
        self._persist(self._state)
        logger.info("Timer engine ready: %s", self._state)

    # ══════════════════════════════════════════════════════════════════
    #  READ INTERFACE
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    def current_state(self) -> TimerState:
        return self._state

    @property
    def phase(self) -> TimerPhase:
        return self._state.phase

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def has_active_loop(self) -> bool:
        return self._tick_handle is not None

    def subscribe(
        self,
        callback: Callable[[TimerState], None] | None = None,
        maxlen: int = SUBSCRIPTION_BUFFER,
    ) -> Subscription:
        """Start receiving snapshots.  The current one is delivered at once."""
        subscription = Subscription(self, callback, maxlen)
        self._subscriptions.append(subscription)
        subscription._deliver(self._seq, self._state)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        subscription._detach()

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def set_duration(self, minutes: int) -> None:
        """Configure a new session length.  Rejected while running."""
        if self._state.is_running:
            raise InvalidStateError("pause or reset before changing the duration")
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise InvalidArgumentError(f"minutes must be a positive integer, got {minutes!r}")
        self._commit(TimerState.for_duration(minutes * 60))

    def start(self) -> None:
        """Begin counting down.  No-op when already running."""
        if self._state.is_running:
            return
        if self._state.remaining_seconds == 0:
            raise InvalidArgumentError("no time remaining; reset first")
        self._run()

    def pause(self) -> None:
        """Freeze the countdown.  No-op unless running."""
        if not self._state.is_running:
            return
        self._cancel_loop()
        self._commit(self._state.evolve(phase=TimerPhase.PAUSED))

    def resume(self) -> None:
        """Continue a paused session (or start an idle one)."""
        self.start()

    def reset(self) -> None:
        """Stop and put the full duration back on the clock."""
        self._cancel_loop()
        self._commit(TimerState.for_duration(self._state.total_seconds))

    def shutdown(self) -> None:
        """Cancel any pending tick without touching the stored state."""
        self._cancel_loop()
        for subscription in list(self._subscriptions):
            self.unsubscribe(subscription)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — tick loop
    # ══════════════════════════════════════════════════════════════════

    def _run(self) -> None:
        self._anchor = self._clock.now()
        self._ticks_applied = 0
        self._commit(self._state.evolve(phase=TimerPhase.RUNNING))
        # A subscriber may have paused us from inside the publish.
        if self._state.is_running:
            self._schedule_next()

    def _schedule_next(self) -> None:
        self._cancel_loop()
        due_at = self._anchor + self._ticks_applied + 1
        delay = max(0.0, due_at - self._clock.now())
        generation = self._generation
        self._tick_handle = self._clock.call_later(
            delay, lambda: self._on_tick(generation)
        )

    def _cancel_loop(self) -> None:
        self._generation += 1
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or not self._state.is_running:
            return  # cancelled after the callback was already queued
        self._tick_handle = None

        # Whole seconds since the anchor, tolerant of millisecond rounding.
        elapsed = int(round(self._clock.now() - self._anchor, 3))
        due = elapsed - self._ticks_applied
        if due > 1:
            logger.info("Catching up %d missed ticks", due - 1)

        for _ in range(due):
            self._ticks_applied += 1
            remaining = self._state.remaining_seconds - 1
            if remaining <= 0:
                self._finish()
                return
            self._commit(self._state.evolve(remaining_seconds=remaining), ticked=True)
            if generation != self._generation or not self._state.is_running:
                return  # paused or reset by a subscriber

        self._schedule_next()

    def _finish(self) -> None:
        self._cancel_loop()
        final = self._state.evolve(remaining_seconds=0, phase=TimerPhase.COMPLETED)
        logger.info("Session of %ds completed", final.total_seconds)
        self._commit(final, ticked=True, completed=True)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — persistence & publication
    # ══════════════════════════════════════════════════════════════════

    def _commit(
        self, new_state: TimerState, ticked: bool = False, completed: bool = False
    ) -> None:
        previous, self._state = self._state, new_state
        self._seq += 1
        if previous.phase is not new_state.phase:
            logger.debug("Timer %s → %s", previous.phase.value, new_state.phase.value)
        self._persist(new_state)
        self._publish(new_state, ticked, completed)

    def _persist(self, state: TimerState) -> None:
        try:
            self._persistence.save(state)
        except PersistenceError as exc:
            logger.warning("Timer state not persisted, will retry: %s", exc)
            self.persistence_failed.emit(str(exc))
        except Exception as exc:
            # A store outside the contract must not stop the countdown.
            logger.exception("State store failed unexpectedly, will retry")
            self.persistence_failed.emit(f"unexpected store error: {exc!r}")

    def _publish(self, state: TimerState, ticked: bool, completed: bool) -> None:
        # Commands issued by an observer mid-delivery queue behind the
        # snapshot being delivered, so every observer sees production order.
        self._outbox.append((self._seq, state, ticked, completed))
        if self._publishing:
            return
        self._publishing = True
        try:
            while self._outbox:
                seq, item, item_ticked, item_completed = self._outbox.popleft()
                self.state_changed.emit(item)
                for subscription in list(self._subscriptions):
                    subscription._deliver(seq, item)
                if item_ticked:
                    self.tick.emit(item.remaining_seconds)
                if item_completed:
                    self.completed.emit(item)
        finally:
            self._publishing = False
