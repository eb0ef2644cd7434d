"""
Registries package: the three independent stores of the ledger.

No registry calls another; equipment ids are carried between them by
convention only.
"""

from equipment_ledger.registries.compliance import ComplianceRegistry
from equipment_ledger.registries.equipment import EquipmentRegistry
from equipment_ledger.registries.service import ServiceRegistry

__all__ = [
    "ComplianceRegistry",
    "EquipmentRegistry",
    "ServiceRegistry",
]
