"""
Integration tests for the PostgreSQL storage backend.

These tests run against a real PostgreSQL instance and verify that:
1. Counters and entries persist across storage instances
2. Failed writes roll back completely
3. Registries behave the same as on the in-memory backend

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from equipment_ledger.registries import ComplianceRegistry, ServiceRegistry
from equipment_ledger.result import ErrorCode, Ok
from equipment_ledger.storage.abstract import LedgerStorage
from equipment_ledger.storage.postgres import PostgresStorage

from tests.constants import ADMIN, FEB_1_2023, JAN_1_2023, TECHNICIAN

WORKERS = 4
CALLS_PER_WORKER = 5

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


@pytest.fixture
def pg_storage(db_pool, unique_namespace: str) -> PostgresStorage:
    storage = PostgresStorage(unique_namespace, db_pool)
    storage.initialize()
    return storage


class TestPostgresStorage:
    """Raw storage contract."""

    def test_satisfies_protocol(self, pg_storage):
        assert isinstance(pg_storage, LedgerStorage)

    def test_initialize_is_idempotent(self, pg_storage):
        pg_storage.initialize()

    def test_commit_persists_across_instances(self, pg_storage, db_pool):
        with pg_storage.transaction() as txn:
            txn.put("items", 1, {"value": "a"})
            txn.set_counter("next-id", 2)

        reopened = PostgresStorage(pg_storage.namespace, db_pool)
        assert reopened.get("items", 1) == {"value": "a"}
        with reopened.transaction() as txn:
            assert txn.peek_counter("next-id") == 2

    def test_exception_rolls_back(self, pg_storage):
        with pytest.raises(RuntimeError):
            with pg_storage.transaction() as txn:
                txn.put("items", 1, {"value": "a"})
                txn.set_counter("next-id", 2)
                raise RuntimeError("boom")

        assert pg_storage.get("items", 1) is None
        with pg_storage.transaction() as txn:
            assert txn.peek_counter("next-id") == 1

    def test_namespaces_are_isolated(self, pg_storage, db_pool):
        other = PostgresStorage(pg_storage.namespace + "-other", db_pool)
        with pg_storage.transaction() as txn:
            txn.put("items", 1, {"value": "a"})

        assert other.get("items", 1) is None
        assert list(other.scan("items")) == []


class TestRegistriesOnPostgres:
    """Registry behaviour against the durable backend."""

    def test_compliance_scenario(self, pg_storage):
        registry = ComplianceRegistry(pg_storage, admin=ADMIN)

        assert registry.create_requirement(
            "Health Department Inspection", "Quarterly", "Kitchen", 90, caller=ADMIN
        ) == Ok(1)
        assert registry.create_requirement(
            "Fire Safety", "Annual", "Kitchen", 365, caller=TECHNICIAN
        ).code is ErrorCode.UNAUTHORIZED
        assert registry.record_inspection(
            1, 1, FEB_1_2023, "All equipment passed inspection", True, caller=TECHNICIAN
        ) == Ok(1)
        assert registry.get_record(1).unwrap().next_due_date == FEB_1_2023 + 90

    def test_service_scenario(self, pg_storage):
        registry = ServiceRegistry(pg_storage)

        assert registry.create_schedule(1, "Monthly Cleaning", 30, JAN_1_2023, caller=ADMIN) == Ok(1)
        assert registry.record_service(1, FEB_1_2023, "Cleaned", "completed", caller=TECHNICIAN) == Ok(1)
        assert registry.get_schedule(1).unwrap().next_service_date == 1675209630
        assert registry.record_service(999, FEB_1_2023, "x", "completed", caller=TECHNICIAN).code is (
            ErrorCode.UNKNOWN_SCHEDULE
        )

    def test_concurrent_services_are_serialized(self, pg_storage):
        registry = ServiceRegistry(pg_storage)
        registry.create_schedule(1, "Filter Swap", 10, 0, caller=ADMIN)

        def worker(offset: int) -> list:
            return [
                registry.record_service(1, offset * 100 + i, "n", "completed", caller=TECHNICIAN).unwrap()
                for i in range(CALLS_PER_WORKER)
            ]

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            ids = [rid for batch in pool.map(worker, range(WORKERS)) for rid in batch]

        total = WORKERS * CALLS_PER_WORKER
        assert sorted(ids) == list(range(1, total + 1))
        last = registry.get_record(total).unwrap()
        assert registry.get_schedule(1).unwrap().last_service_date == last.service_date

    def test_query_helpers_filter_in_the_database(self, pg_storage):
        registry = ComplianceRegistry(pg_storage, admin=ADMIN)
        registry.create_requirement("Health", "Quarterly", "Kitchen", 90, caller=ADMIN)
        for equipment_id, date in ((1, 100), (2, 150), (1, 200)):
            registry.record_inspection(equipment_id, 1, date, "n", True, caller=TECHNICIAN)

        assert [r.record_id for r in registry.records_for_equipment(1)] == [1, 3]
        assert registry.latest_record(1, 1).unwrap().inspection_date == 200
        assert pg_storage.count("compliance-records") == 3
