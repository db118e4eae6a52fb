"""Timer package."""

from ..errors import (
    InvalidArgumentError,
    InvalidStateError,
    PersistenceError,
    TimerError,
)
from .clock import Clock, ManualClock, QtClock
from .engine import TimerEngine
from .state import (
    DEFAULT_TOTAL_SECONDS,
    DURATION_PRESETS,
    TimerPhase,
    TimerState,
    format_time,
)
from .subscription import Subscription

__all__ = [
    "Clock",
    "ManualClock",
    "QtClock",
    "TimerEngine",
    "InvalidArgumentError",
    "InvalidStateError",
    "PersistenceError",
    "TimerError",
    "DEFAULT_TOTAL_SECONDS",
    "DURATION_PRESETS",
    "TimerPhase",
    "TimerState",
    "format_time",
    "Subscription",
]
