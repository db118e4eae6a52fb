"""Key/value state stores.

The engine only ever talks to a store through ``get`` and ``put``.  A
store that can write several keys in one transaction overrides
``put_many`` so a snapshot lands atomically.
"""

from __future__ import annotations

from typing import Any, Iterable


class StateStore:
    """Interface for durable key/value persistence.

    Implementations raise ``PersistenceError`` for every I/O failure.
    """

    def get(self, key: str) -> Any:
        """Return the stored value, or ``None`` if *key* was never written."""
        raise NotImplementedError

    def put(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def put_many(self, items: Iterable[tuple[str, Any]]) -> None:
        for key, value in items:
            self.put(key, value)


class MemoryStateStore(StateStore):
    """Dict-backed store.  Survives engine recreation, not process exit."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)
