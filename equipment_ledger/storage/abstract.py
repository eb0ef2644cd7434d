"""
Storage interfaces for the equipment ledger.

Each registry owns one namespace: a set of collections keyed by integer id plus
scalar "next id" counters. Writes only happen inside ``transaction()``, which
is serialized per namespace and commits all staged writes or none of them.
"""

from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple, runtime_checkable

Payload = Dict[str, Any]

COUNTER_START = 1


class StorageError(Exception):
    """Backend fault (connection loss, schema problem). Not a ledger outcome."""


@runtime_checkable
class StorageTransaction(Protocol):
    """Read/write view of a namespace for the duration of one transaction."""

    def get(self, collection: str, key: int) -> Optional[Payload]:
        ...

    def put(self, collection: str, key: int, value: Payload) -> None:
        ...

    def peek_counter(self, name: str) -> int:
        """Next value the counter would hand out (``COUNTER_START`` if unset)."""
        ...

    def set_counter(self, name: str, value: int) -> None:
        ...


@runtime_checkable
class LedgerStorage(Protocol):
    """
    Durable key-value storage for a single registry.

    Attributes
    ----------
    namespace : str
        Name isolating this registry's collections and counters.
    """

    namespace: str

    def get(self, collection: str, key: int) -> Optional[Payload]:
        ...

    def scan(
        self, collection: str, where: Optional[Payload] = None
    ) -> Iterator[Tuple[int, Payload]]:
        """
        Yield ``(key, value)`` pairs in ascending key order.

        ``where`` keeps only values whose fields equal every given field.
        """
        ...

    def count(self, collection: str) -> int:
        ...

    def transaction(self) -> AbstractContextManager[StorageTransaction]:
        ...


class AbstractLedgerStorage(abc.ABC):
    """
    Optional ABC helper for class-based backends.
    """

    namespace: str

    @abc.abstractmethod
    def get(self, collection: str, key: int) -> Optional[Payload]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def scan(
        self, collection: str, where: Optional[Payload] = None
    ) -> Iterator[Tuple[int, Payload]]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def count(self, collection: str) -> int:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def transaction(self) -> AbstractContextManager[StorageTransaction]:  # pragma: no cover
        raise NotImplementedError


__all__ = [
    "AbstractLedgerStorage",
    "COUNTER_START",
    "LedgerStorage",
    "Payload",
    "StorageError",
    "StorageTransaction",
]
