"""
Domain package for the equipment ledger.

Exports the entity models and the due-date law shared by the registries.
Keep this package focused on data definitions and validation concerns.
"""

from equipment_ledger.domain.models import (
    ComplianceRecord,
    ComplianceRequirement,
    Equipment,
    MaintenanceSchedule,
    ServiceRecord,
    project_due_date,
)

__all__ = [
    "ComplianceRecord",
    "ComplianceRequirement",
    "Equipment",
    "MaintenanceSchedule",
    "ServiceRecord",
    "project_due_date",
]
