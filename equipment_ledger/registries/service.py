"""
Service registry: maintenance schedules with rolling due dates and the
immutable service records written against them.

Recording a service replaces the schedule's ``last_service_date`` and
``next_service_date`` and appends a service record in the same transaction,
so readers never see one without the other.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from equipment_ledger.domain.models import MaintenanceSchedule, ServiceRecord, project_due_date
from equipment_ledger.result import NONE, Err, ErrorCode, Lookup, Ok, Result
from equipment_ledger.storage.abstract import LedgerStorage
from equipment_ledger.utils.logging import get_logger

log = get_logger(__name__)

NAMESPACE = "service-scheduling"
SCHEDULES = "maintenance-schedule"
RECORDS = "service-records"
NEXT_SCHEDULE_ID = "next-schedule-id"
NEXT_RECORD_ID = "next-record-id"


class ServiceRegistry:
    """Owns maintenance schedules and the service records that roll them forward."""

    def __init__(self, storage: LedgerStorage) -> None:
        self._storage = storage

    def create_schedule(
        self,
        equipment_id: int,
        service_type: str,
        frequency_days: int,
        initial_service_date: int,
        caller: str,
    ) -> Result[int]:
        """Create a schedule whose first due date is one period after ``initial_service_date``."""
        with self._storage.transaction() as txn:
            schedule_id = txn.peek_counter(NEXT_SCHEDULE_ID)
            schedule = MaintenanceSchedule(
                schedule_id=schedule_id,
                equipment_id=equipment_id,
                service_type=service_type,
                frequency_days=frequency_days,
                last_service_date=initial_service_date,
                next_service_date=project_due_date(initial_service_date, frequency_days),
                created_by=caller,
            )
            txn.put(SCHEDULES, schedule_id, schedule.model_dump())
            txn.set_counter(NEXT_SCHEDULE_ID, schedule_id + 1)

        log.info(
            "schedule created",
            extra={
                "schedule_id": schedule_id,
                "equipment_id": equipment_id,
                "next_service_date": schedule.next_service_date,
            },
        )
        return Ok(schedule_id)

    def get_schedule(self, schedule_id: int) -> Lookup[MaintenanceSchedule]:
        payload = self._storage.get(SCHEDULES, schedule_id)
        if payload is None:
            return NONE
        return Ok(MaintenanceSchedule.model_validate(payload))

    def record_service(
        self,
        schedule_id: int,
        service_date: int,
        notes: str,
        status: str,
        caller: str,
    ) -> Result[int]:
        """
        Roll the schedule forward to ``service_date`` and append a service record.

        Returns ``Err(UNKNOWN_SCHEDULE)`` if the schedule does not exist; no
        counter or schedule is touched in that case.
        """
        with self._storage.transaction() as txn:
            payload = txn.get(SCHEDULES, schedule_id)
            if payload is None:
                log.warning(
                    "service rejected",
                    extra={"code": ErrorCode.UNKNOWN_SCHEDULE.value, "schedule_id": schedule_id},
                )
                return Err(ErrorCode.UNKNOWN_SCHEDULE, f"schedule {schedule_id} does not exist")

            schedule = MaintenanceSchedule.model_validate(payload).rolled_over(service_date)
            record_id = txn.peek_counter(NEXT_RECORD_ID)
            record = ServiceRecord(
                record_id=record_id,
                equipment_id=schedule.equipment_id,
                schedule_id=schedule_id,
                service_type=schedule.service_type,
                service_date=service_date,
                technician=caller,
                notes=notes,
                status=status,
            )
            txn.put(SCHEDULES, schedule_id, schedule.model_dump())
            txn.put(RECORDS, record_id, record.model_dump())
            txn.set_counter(NEXT_RECORD_ID, record_id + 1)

        log.info(
            "service recorded",
            extra={
                "record_id": record_id,
                "schedule_id": schedule_id,
                "status": status,
                "next_service_date": schedule.next_service_date,
            },
        )
        return Ok(record_id)

    def get_record(self, record_id: int) -> Lookup[ServiceRecord]:
        payload = self._storage.get(RECORDS, record_id)
        if payload is None:
            return NONE
        return Ok(ServiceRecord.model_validate(payload))

    def schedules_for_equipment(self, equipment_id: int) -> List[MaintenanceSchedule]:
        return self._schedules(where={"equipment_id": equipment_id})

    def due_schedules(self, as_of: int) -> List[MaintenanceSchedule]:
        """Schedules whose next service date is on or before ``as_of``."""
        return [s for s in self._schedules() if s.next_service_date <= as_of]

    def records_for_schedule(self, schedule_id: int) -> List[ServiceRecord]:
        return [
            ServiceRecord.model_validate(p)
            for _, p in self._storage.scan(RECORDS, where={"schedule_id": schedule_id})
        ]

    def _schedules(self, where: Optional[Dict[str, Any]] = None) -> List[MaintenanceSchedule]:
        return [
            MaintenanceSchedule.model_validate(p)
            for _, p in self._storage.scan(SCHEDULES, where=where)
        ]


__all__ = ["NAMESPACE", "ServiceRegistry"]
