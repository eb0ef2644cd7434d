"""
Infrastructure package for the equipment ledger.

Centralizes database connectivity concerns (pool lifecycle, connection retry).
Keep this layer focused on I/O and resource management, decoupled from
registry logic.
"""

from equipment_ledger.infrastructure.db_factory import PoolManager, get_sync_pool

__all__ = [
    "PoolManager",
    "get_sync_pool",
]
