"""
Equipment Ledger - lifecycle records for registered equipment.

Three independent stores with sequential integer identity:

- Equipment registry: immutable equipment records
- Compliance registry: admin-defined requirements and inspection records,
  each inspection projecting its next due date
- Service registry: maintenance schedules with rolling due dates and the
  service records that advance them

Every write returns ``Ok(new_id)`` or ``Err(code)``; every lookup returns
``Ok(record)`` or ``NONE``. The ledger records due dates for others to query;
it never acts on them.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from equipment_ledger.config import Settings, get_settings
from equipment_ledger.domain.models import (
    ComplianceRecord,
    ComplianceRequirement,
    Equipment,
    MaintenanceSchedule,
    ServiceRecord,
    project_due_date,
)
from equipment_ledger.ledger import Ledger, available_backends, build_ledger
from equipment_ledger.registries import ComplianceRegistry, EquipmentRegistry, ServiceRegistry
from equipment_ledger.result import NONE, Absent, Err, ErrorCode, Lookup, Ok, Result, ResultError
from equipment_ledger.storage import LedgerStorage, MemoryStorage, StorageError
from equipment_ledger.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Assembly
    "Ledger",
    "available_backends",
    "build_ledger",
    # Registries
    "ComplianceRegistry",
    "EquipmentRegistry",
    "ServiceRegistry",
    # Domain
    "ComplianceRecord",
    "ComplianceRequirement",
    "Equipment",
    "MaintenanceSchedule",
    "ServiceRecord",
    "project_due_date",
    # Results
    "Absent",
    "Err",
    "ErrorCode",
    "Lookup",
    "NONE",
    "Ok",
    "Result",
    "ResultError",
    # Storage
    "LedgerStorage",
    "MemoryStorage",
    "StorageError",
    # Logging
    "configure_logging",
    "get_logger",
]
