"""Persistence package."""

from .sql_store import SqlStateStore
from .store import MemoryStateStore, StateStore

__all__ = ["SqlStateStore", "MemoryStateStore", "StateStore"]
