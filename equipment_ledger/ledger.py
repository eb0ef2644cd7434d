"""
Ledger assembly: wires the three registries to a storage backend.

Usage:
    from equipment_ledger.ledger import build_ledger

    ledger = build_ledger()
    equipment_id = ledger.equipment.register(..., caller="ST1...").unwrap()

Each registry gets its own storage namespace. The registries never call each
other, so they may live on different backends or processes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from equipment_ledger.config import Settings, get_settings
from equipment_ledger.registries.compliance import NAMESPACE as COMPLIANCE_NAMESPACE
from equipment_ledger.registries.compliance import ComplianceRegistry
from equipment_ledger.registries.equipment import NAMESPACE as EQUIPMENT_NAMESPACE
from equipment_ledger.registries.equipment import EquipmentRegistry
from equipment_ledger.registries.service import NAMESPACE as SERVICE_NAMESPACE
from equipment_ledger.registries.service import ServiceRegistry
from equipment_ledger.storage.abstract import LedgerStorage
from equipment_ledger.storage.memory import MemoryStorage
from equipment_ledger.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

StorageFactory = Callable[[str, Settings], LedgerStorage]


def _memory_storage(namespace: str, settings: Settings) -> LedgerStorage:
    return MemoryStorage(namespace)


def _postgres_storage(namespace: str, settings: Settings) -> LedgerStorage:
    from equipment_ledger.infrastructure.db_factory import get_sync_pool
    from equipment_ledger.storage.postgres import PostgresStorage

    pool = get_sync_pool(min_size=settings.db_pool_min_size, max_size=settings.db_pool_max_size)
    storage = PostgresStorage(namespace, pool)
    storage.initialize()
    return storage


def _backend_factories() -> Dict[str, StorageFactory]:
    """Registry of available storage backends."""
    return {
        "memory": _memory_storage,
        "postgres": _postgres_storage,
    }


def available_backends() -> List[str]:
    """List available storage backend names."""
    return sorted(_backend_factories().keys())


def _resolve_backend(name: str) -> StorageFactory:
    factories = _backend_factories()
    if name not in factories:
        raise ValueError(f"Unknown storage backend '{name}'. Available: {', '.join(factories)}")
    return factories[name]


@dataclass
class Ledger:
    """The three registries of one deployment."""

    equipment: EquipmentRegistry
    compliance: ComplianceRegistry
    service: ServiceRegistry
    backend: str = field(default="memory")


def build_ledger(settings: Optional[Settings] = None, backend: Optional[str] = None) -> Ledger:
    """
    Construct a ledger from settings.

    Applies ``settings.log_level`` and ``settings.log_json`` to root logging
    before any registry is created.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to the cached ``get_settings()``.
    backend : str, optional
        Overrides ``settings.storage_backend``.

    Raises
    ------
    ValueError
        If the backend name is not registered.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    backend_name = backend or settings.storage_backend
    factory = _resolve_backend(backend_name)

    ledger = Ledger(
        equipment=EquipmentRegistry(factory(EQUIPMENT_NAMESPACE, settings)),
        compliance=ComplianceRegistry(
            factory(COMPLIANCE_NAMESPACE, settings), admin=settings.admin_principal
        ),
        service=ServiceRegistry(factory(SERVICE_NAMESPACE, settings)),
        backend=backend_name,
    )
    log.info("ledger ready", extra={"backend": backend_name, "app_env": settings.app_env})
    return ledger


__all__ = ["Ledger", "available_backends", "build_ledger"]
