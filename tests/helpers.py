"""Shared test helpers for Stillpoint."""

from stillpoint.persistence.store import MemoryStateStore
from stillpoint.errors import PersistenceError


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FailingStore(MemoryStateStore):
    """Memory store that can be switched into a broken state."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.write_attempts = 0

    def get(self, key):
        if self.fail_reads:
            raise PersistenceError("disk on fire")
        return super().get(key)

    def put(self, key, value):
        self.write_attempts += 1
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().put(key, value)


class BrokenStore(MemoryStateStore):
    """Store that raises something other than ``PersistenceError``."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.broken = False

    def get(self, key):
        if self.broken:
            raise OSError("read-only file system")
        return super().get(key)

    def put(self, key, value):
        if self.broken:
            raise OSError("read-only file system")
        super().put(key, value)
