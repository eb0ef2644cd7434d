"""
Storage package for the equipment ledger.

Backends implement the LedgerStorage protocol: per-registry collections keyed
by integer id, "next id" counters, and serialized all-or-nothing transactions.
"""

from equipment_ledger.storage.abstract import (
    AbstractLedgerStorage,
    LedgerStorage,
    StorageError,
    StorageTransaction,
)
from equipment_ledger.storage.memory import MemoryStorage

__all__ = [
    "AbstractLedgerStorage",
    "LedgerStorage",
    "MemoryStorage",
    "StorageError",
    "StorageTransaction",
]
