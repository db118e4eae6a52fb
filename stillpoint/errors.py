"""Exceptions raised by the timer engine and its collaborators."""


class TimerError(Exception):
    """Base class for every error the timer package raises."""


class InvalidArgumentError(TimerError, ValueError):
    """A command's preconditions are unmet (zero time left, bad minutes)."""


class InvalidStateError(TimerError, RuntimeError):
    """The command is not permitted in the current phase."""


class PersistenceError(TimerError):
    """The state store failed to read or write.

    Never raised out of a command or a tick: the engine logs it and keeps
    running in memory.
    """
