"""
Equipment registry: append-only store of equipment records.
"""

from __future__ import annotations

from typing import List, Optional

from equipment_ledger.domain.models import Equipment
from equipment_ledger.result import NONE, Lookup, Ok, Result
from equipment_ledger.storage.abstract import LedgerStorage
from equipment_ledger.utils.logging import get_logger

log = get_logger(__name__)

NAMESPACE = "equipment-registration"
EQUIPMENT = "equipment-registry"
NEXT_EQUIPMENT_ID = "next-equipment-id"


class EquipmentRegistry:
    """Registers equipment and serves lookups. Records are never mutated."""

    def __init__(self, storage: LedgerStorage) -> None:
        self._storage = storage

    def register(
        self,
        name: str,
        equipment_type: str,
        manufacturer: str,
        model: str,
        serial_number: str,
        installation_date: int,
        warranty_expiration: int,
        caller: str,
    ) -> Result[int]:
        """
        Store a new equipment record owned by ``caller`` and return its id.

        Always succeeds for well-typed input; a pydantic ``ValidationError`` is
        raised for malformed fields before any id is consumed.
        """
        with self._storage.transaction() as txn:
            equipment_id = txn.peek_counter(NEXT_EQUIPMENT_ID)
            equipment = Equipment(
                equipment_id=equipment_id,
                name=name,
                equipment_type=equipment_type,
                manufacturer=manufacturer,
                model=model,
                serial_number=serial_number,
                installation_date=installation_date,
                warranty_expiration=warranty_expiration,
                owner=caller,
            )
            txn.put(EQUIPMENT, equipment_id, equipment.model_dump())
            txn.set_counter(NEXT_EQUIPMENT_ID, equipment_id + 1)

        log.info(
            "equipment registered",
            extra={"equipment_id": equipment_id, "serial_number": serial_number, "owner": caller},
        )
        return Ok(equipment_id)

    def get(self, equipment_id: int) -> Lookup[Equipment]:
        payload = self._storage.get(EQUIPMENT, equipment_id)
        if payload is None:
            return NONE
        return Ok(Equipment.model_validate(payload))

    def list_equipment(self, owner: Optional[str] = None) -> List[Equipment]:
        """All equipment in registration order, optionally filtered by owner."""
        where = None if owner is None else {"owner": owner}
        return [
            Equipment.model_validate(payload)
            for _, payload in self._storage.scan(EQUIPMENT, where=where)
        ]

    def count(self) -> int:
        return self._storage.count(EQUIPMENT)


__all__ = ["EquipmentRegistry", "NAMESPACE"]
