"""Immutable timer snapshots.

A ``TimerState`` is the only thing the engine ever hands out.  Observers,
the persistence adapter and the UI all receive the same frozen value, so
nobody can reach back into the engine and mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class TimerPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_TOTAL_SECONDS = 15 * 60
DURATION_PRESETS = (5, 10, 15, 20)  # minutes, quick-select chips


def format_time(seconds: int) -> str:
    """``MM:SS``, minutes not wrapped at the hour (3600 → ``60:00``)."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class TimerState:
    """One snapshot of the countdown."""

    total_seconds: int = DEFAULT_TOTAL_SECONDS
    remaining_seconds: int = DEFAULT_TOTAL_SECONDS
    phase: TimerPhase = TimerPhase.IDLE

    def __post_init__(self) -> None:
        if self.total_seconds < 1:
            raise ValueError(f"total_seconds must be >= 1, got {self.total_seconds}")
        if not 0 <= self.remaining_seconds <= self.total_seconds:
            raise ValueError(
                f"remaining_seconds {self.remaining_seconds} outside "
                f"0..{self.total_seconds}"
            )

    @classmethod
    def for_duration(cls, total_seconds: int) -> TimerState:
        """A fresh IDLE snapshot with the full duration remaining."""
        return cls(total_seconds, total_seconds, TimerPhase.IDLE)

    def evolve(self, **changes) -> TimerState:
        return replace(self, **changes)

    # ── derived ───────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self.phase is TimerPhase.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.phase is TimerPhase.PAUSED

    @property
    def elapsed_seconds(self) -> int:
        return self.total_seconds - self.remaining_seconds

    @property
    def progress(self) -> float:
        """0.0 → 1.0 through the session."""
        return max(0.0, min(1.0, self.elapsed_seconds / self.total_seconds))

    @property
    def formatted(self) -> str:
        return format_time(self.remaining_seconds)

    def __str__(self) -> str:
        return f"{self.formatted} [{self.phase.value}]"
