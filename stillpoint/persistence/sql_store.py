"""SQLite-backed ``StateStore`` using the shared SQLAlchemy session."""

from __future__ import annotations

import json
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import StateEntry
from ..errors import PersistenceError
from .store import StateStore


class SqlStateStore(StateStore):
    """Keys live in the ``timer_state`` table, prefixed by *namespace*.

    ``put_many`` writes every key in one transaction, so a snapshot is
    either fully stored or not at all.
    """

    def __init__(self, namespace: str = "timer") -> None:
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}.{key}" if self._namespace else key

    def get(self, key: str) -> Any:
        try:
            with get_session() as db:
                entry = db.get(StateEntry, self._key(key))
                if entry is None:
                    return None
                return json.loads(entry.value)
        except (SQLAlchemyError, ValueError) as exc:
            raise PersistenceError(f"could not read {key!r}: {exc}") from exc

    def put(self, key: str, value: Any) -> None:
        self.put_many([(key, value)])

    def put_many(self, items: Iterable[tuple[str, Any]]) -> None:
        try:
            with get_session() as db:
                for key, value in items:
                    encoded = json.dumps(value)
                    entry = db.get(StateEntry, self._key(key))
                    if entry is None:
                        db.add(StateEntry(key=self._key(key), value=encoded))
                    elif entry.value != encoded:
                        entry.value = encoded
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"could not write timer state: {exc}") from exc
