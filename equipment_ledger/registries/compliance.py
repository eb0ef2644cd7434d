"""
Compliance registry: admin-defined requirements and the inspections recorded
against them.

Requirement creation is gated on a single admin identity fixed when the
registry is constructed. Inspections must reference an existing requirement;
their ``next_due_date`` is projected from the requirement's frequency at the
moment of recording and never recomputed. ``equipment_id`` is stored as given
and is not checked against the equipment registry.
"""

from __future__ import annotations

from typing import List

from equipment_ledger.domain.models import (
    ComplianceRecord,
    ComplianceRequirement,
    project_due_date,
)
from equipment_ledger.result import NONE, Err, ErrorCode, Lookup, Ok, Result
from equipment_ledger.storage.abstract import LedgerStorage
from equipment_ledger.utils.logging import get_logger

log = get_logger(__name__)

NAMESPACE = "compliance-tracking"
REQUIREMENTS = "compliance-requirements"
RECORDS = "compliance-records"
NEXT_REQUIREMENT_ID = "next-requirement-id"
NEXT_RECORD_ID = "next-record-id"


class ComplianceRegistry:
    """
    Parameters
    ----------
    storage : LedgerStorage
        Storage namespace owned by this registry.
    admin : str
        The only caller allowed to create requirements.
    """

    def __init__(self, storage: LedgerStorage, admin: str) -> None:
        self._storage = storage
        self._admin = admin

    @property
    def admin(self) -> str:
        return self._admin

    def create_requirement(
        self,
        title: str,
        description: str,
        equipment_type: str,
        frequency_days: int,
        caller: str,
    ) -> Result[int]:
        """
        Define a new requirement.

        Returns ``Err(UNAUTHORIZED)`` unless ``caller`` is the admin, and
        ``Err(INVALID_FREQUENCY)`` when ``frequency_days`` is not positive.
        Neither failure consumes a requirement id.
        """
        if caller != self._admin:
            log.warning(
                "requirement creation rejected",
                extra={"code": ErrorCode.UNAUTHORIZED.value, "caller": caller},
            )
            return Err(ErrorCode.UNAUTHORIZED, f"caller {caller} is not the compliance admin")

        with self._storage.transaction() as txn:
            requirement_id = txn.peek_counter(NEXT_REQUIREMENT_ID)
            requirement = ComplianceRequirement(
                requirement_id=requirement_id,
                title=title,
                description=description,
                equipment_type=equipment_type,
                frequency_days=frequency_days,
                created_by=caller,
            )
            if requirement.frequency_days <= 0:
                log.warning(
                    "requirement creation rejected",
                    extra={"code": ErrorCode.INVALID_FREQUENCY.value, "frequency_days": frequency_days},
                )
                return Err(ErrorCode.INVALID_FREQUENCY, "frequency_days must be positive")
            txn.put(REQUIREMENTS, requirement_id, requirement.model_dump())
            txn.set_counter(NEXT_REQUIREMENT_ID, requirement_id + 1)

        log.info(
            "requirement created",
            extra={"requirement_id": requirement_id, "frequency_days": frequency_days},
        )
        return Ok(requirement_id)

    def get_requirement(self, requirement_id: int) -> Lookup[ComplianceRequirement]:
        payload = self._storage.get(REQUIREMENTS, requirement_id)
        if payload is None:
            return NONE
        return Ok(ComplianceRequirement.model_validate(payload))

    def record_inspection(
        self,
        equipment_id: int,
        requirement_id: int,
        inspection_date: int,
        notes: str,
        passed: bool,
        caller: str,
    ) -> Result[int]:
        """
        Record an inspection and project its next due date.

        Returns ``Err(UNKNOWN_REQUIREMENT)`` if ``requirement_id`` does not
        exist; the record counter is left untouched in that case.
        """
        with self._storage.transaction() as txn:
            payload = txn.get(REQUIREMENTS, requirement_id)
            if payload is None:
                log.warning(
                    "inspection rejected",
                    extra={
                        "code": ErrorCode.UNKNOWN_REQUIREMENT.value,
                        "requirement_id": requirement_id,
                    },
                )
                return Err(
                    ErrorCode.UNKNOWN_REQUIREMENT,
                    f"requirement {requirement_id} does not exist",
                )
            requirement = ComplianceRequirement.model_validate(payload)
            record_id = txn.peek_counter(NEXT_RECORD_ID)
            record = ComplianceRecord(
                record_id=record_id,
                equipment_id=equipment_id,
                requirement_id=requirement_id,
                inspection_date=inspection_date,
                inspector=caller,
                notes=notes,
                passed=passed,
                next_due_date=project_due_date(inspection_date, requirement.frequency_days),
            )
            txn.put(RECORDS, record_id, record.model_dump())
            txn.set_counter(NEXT_RECORD_ID, record_id + 1)

        log.info(
            "inspection recorded",
            extra={
                "record_id": record_id,
                "equipment_id": equipment_id,
                "requirement_id": requirement_id,
                "passed": passed,
                "next_due_date": record.next_due_date,
            },
        )
        return Ok(record_id)

    def get_record(self, record_id: int) -> Lookup[ComplianceRecord]:
        payload = self._storage.get(RECORDS, record_id)
        if payload is None:
            return NONE
        return Ok(ComplianceRecord.model_validate(payload))

    def records_for_equipment(self, equipment_id: int) -> List[ComplianceRecord]:
        """Inspections of one piece of equipment, oldest record first."""
        return [
            ComplianceRecord.model_validate(payload)
            for _, payload in self._storage.scan(RECORDS, where={"equipment_id": equipment_id})
        ]

    def latest_record(self, equipment_id: int, requirement_id: int) -> Lookup[ComplianceRecord]:
        """Most recently recorded inspection for an equipment/requirement pair."""
        matches = [
            ComplianceRecord.model_validate(payload)
            for _, payload in self._storage.scan(
                RECORDS, where={"equipment_id": equipment_id, "requirement_id": requirement_id}
            )
        ]
        if not matches:
            return NONE
        return Ok(matches[-1])


__all__ = ["ComplianceRegistry", "NAMESPACE"]
