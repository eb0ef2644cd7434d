"""
In-process storage backend.

Collections are plain dicts guarded by a per-namespace re-entrant lock. A
transaction stages its writes and applies them only when the block exits
without an exception, so a failed call leaves counters and collections
exactly as they were.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Generator, Iterator, Optional, Tuple

from equipment_ledger.storage.abstract import (
    COUNTER_START,
    AbstractLedgerStorage,
    Payload,
)


class _MemoryTransaction:
    def __init__(self, storage: "MemoryStorage") -> None:
        self._storage = storage
        self._writes: Dict[Tuple[str, int], Payload] = {}
        self._counters: Dict[str, int] = {}

    def get(self, collection: str, key: int) -> Optional[Payload]:
        staged = self._writes.get((collection, key))
        if staged is not None:
            return dict(staged)
        return self._storage._read(collection, key)

    def put(self, collection: str, key: int, value: Payload) -> None:
        self._writes[(collection, key)] = dict(value)

    def peek_counter(self, name: str) -> int:
        if name in self._counters:
            return self._counters[name]
        return self._storage._counters.get(name, COUNTER_START)

    def set_counter(self, name: str, value: int) -> None:
        self._counters[name] = value

    def _apply(self) -> None:
        for (collection, key), value in self._writes.items():
            self._storage._collections.setdefault(collection, {})[key] = value
        self._storage._counters.update(self._counters)


class MemoryStorage(AbstractLedgerStorage):
    """
    Dict-backed storage for a single namespace.

    Parameters
    ----------
    namespace : str
        Registry name, used only for identification and logging.
    """

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        self._collections: Dict[str, Dict[int, Payload]] = {}
        self._counters: Dict[str, int] = {}
        self._lock = threading.RLock()

    def _read(self, collection: str, key: int) -> Optional[Payload]:
        value = self._collections.get(collection, {}).get(key)
        return dict(value) if value is not None else None

    def get(self, collection: str, key: int) -> Optional[Payload]:
        with self._lock:
            return self._read(collection, key)

    def scan(
        self, collection: str, where: Optional[Payload] = None
    ) -> Iterator[Tuple[int, Payload]]:
        with self._lock:
            items = sorted(self._collections.get(collection, {}).items())
        if where:
            items = [
                (key, value)
                for key, value in items
                if all(value.get(field) == expected for field, expected in where.items())
            ]
        for key, value in items:
            yield key, dict(value)

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collections.get(collection, {}))

    @contextmanager
    def transaction(self) -> Generator[_MemoryTransaction, None, None]:
        with self._lock:
            txn = _MemoryTransaction(self)
            yield txn
            txn._apply()


__all__ = ["MemoryStorage"]
