"""Translate ``TimerState`` snapshots to and from a key/value store.

Layout (one key each)::

    total_seconds       int
    remaining_seconds   int
    is_running          bool
    is_paused           bool

A snapshot that was RUNNING when the process died loads as PAUSED: a
fresh process never starts counting down on its own.
"""

from __future__ import annotations

import logging
from typing import Any

from ..persistence.store import StateStore
from .state import DEFAULT_TOTAL_SECONDS, TimerPhase, TimerState

logger = logging.getLogger(__name__)

KEY_TOTAL = "total_seconds"
KEY_REMAINING = "remaining_seconds"
KEY_RUNNING = "is_running"
KEY_PAUSED = "is_paused"

STATE_KEYS = (KEY_TOTAL, KEY_REMAINING, KEY_RUNNING, KEY_PAUSED)


def to_record(state: TimerState) -> dict[str, Any]:
    return {
        KEY_TOTAL: state.total_seconds,
        KEY_REMAINING: state.remaining_seconds,
        KEY_RUNNING: state.is_running,
        KEY_PAUSED: state.is_paused,
    }


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        if value is not None:
            logger.warning("Ignoring malformed stored value %r", value)
        return default
    return value


def _as_bool(value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        logger.warning("Ignoring malformed stored flag %r", value)
        return False
    return value


def from_record(record: dict[str, Any]) -> TimerState:
    """Rebuild a snapshot, clamping bad numbers and reconciling the phase."""
    total = _as_int(record.get(KEY_TOTAL), DEFAULT_TOTAL_SECONDS)
    if total < 1:
        logger.warning("Stored total_seconds %d is not positive, using default", total)
        total = DEFAULT_TOTAL_SECONDS
    remaining = _as_int(record.get(KEY_REMAINING), total)
    remaining = max(0, min(total, remaining))

    if remaining == 0:
        phase = TimerPhase.COMPLETED
    elif _as_bool(record.get(KEY_RUNNING)) or _as_bool(record.get(KEY_PAUSED)):
        phase = TimerPhase.PAUSED
    else:
        phase = TimerPhase.IDLE
    return TimerState(total, remaining, phase)


class TimerPersistence:
    """Last-write-wins snapshot writer with retry-on-next-change.

    Only keys whose value changed since the last successful write are sent
    to the store.  After a failure the adapter is *dirty* and the next
    ``save`` rewrites every key.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._written: dict[str, Any] = {}
        self._dirty = True

    @property
    def dirty(self) -> bool:
        """True until the most recent snapshot has been stored in full."""
        return self._dirty

    def load(self) -> TimerState:
        """Read the last snapshot, or defaults if there is none or the store fails."""
        try:
            record = {key: self._store.get(key) for key in STATE_KEYS}
        except Exception:
            logger.warning("Could not load timer state, starting fresh", exc_info=True)
            return TimerState()
        if all(value is None for value in record.values()):
            return TimerState()
        state = from_record(record)
        logger.debug("Loaded timer state %r from %r", state, record)
        return state

    def save(self, state: TimerState) -> None:
        """Write *state*.  Raises ``PersistenceError``; the caller decides
        whether that is fatal."""
        record = to_record(state)
        if self._dirty:
            changed = record
        else:
            changed = {k: v for k, v in record.items() if self._written.get(k) != v}
        if not changed:
            return
        try:
            self._store.put_many(changed.items())
        except Exception:
            self._dirty = True
            raise
        self._written.update(changed)
        self._dirty = False
