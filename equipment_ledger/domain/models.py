"""
Domain models for the equipment ledger.

Every entity is a frozen Pydantic model keyed by a sequential integer id.
Dates are plain integers in a caller-chosen unit; ``frequency_days`` must use
the same unit because the ledger sums the two verbatim.
"""
from __future__ import annotations

from pydantic import BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "strict": True,
}


def project_due_date(base_date: int, frequency_days: int) -> int:
    """Next obligation date for an event at ``base_date``."""
    return base_date + frequency_days


class Equipment(BaseModel):
    """
    A registered piece of equipment. Never mutated after insertion.
    """

    equipment_id: int = Field(..., description="Sequential identifier, starting at 1.")
    name: str
    equipment_type: str
    manufacturer: str
    model: str
    serial_number: str
    installation_date: int
    warranty_expiration: int
    owner: str = Field(..., description="Identity of the registering caller.")

    model_config = _FROZEN


class ComplianceRequirement(BaseModel):
    """
    Admin-defined recurring obligation for a category of equipment.
    """

    requirement_id: int
    title: str
    description: str
    equipment_type: str = Field(..., description="Equipment category, not a specific item.")
    frequency_days: int
    is_active: bool = True
    created_by: str

    model_config = _FROZEN


class ComplianceRecord(BaseModel):
    """
    One inspection against a requirement. ``next_due_date`` is fixed at creation.
    """

    record_id: int
    equipment_id: int = Field(..., description="Advisory reference; not checked.")
    requirement_id: int
    inspection_date: int
    inspector: str
    notes: str
    passed: bool
    next_due_date: int

    model_config = _FROZEN


class MaintenanceSchedule(BaseModel):
    """
    Recurring maintenance definition for one piece of equipment.

    The stored schedule is replaced with ``rolled_over()`` each time a service
    is recorded against it.
    """

    schedule_id: int
    equipment_id: int = Field(..., description="Advisory reference; not checked.")
    service_type: str
    frequency_days: int
    last_service_date: int
    next_service_date: int
    created_by: str

    model_config = _FROZEN

    def rolled_over(self, service_date: int) -> "MaintenanceSchedule":
        return self.model_copy(
            update={
                "last_service_date": service_date,
                "next_service_date": project_due_date(service_date, self.frequency_days),
            }
        )


class ServiceRecord(BaseModel):
    """
    One completed service. ``equipment_id`` and ``service_type`` are copied
    from the schedule when the record is written.
    """

    record_id: int
    equipment_id: int
    schedule_id: int
    service_type: str
    service_date: int
    technician: str
    notes: str
    status: str = Field(..., description="Free-form tag, e.g. 'completed'.")

    model_config = _FROZEN


__all__ = [
    "ComplianceRecord",
    "ComplianceRequirement",
    "Equipment",
    "MaintenanceSchedule",
    "ServiceRecord",
    "project_due_date",
]
