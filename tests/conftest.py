"""
Pytest configuration for the equipment ledger.

Provides fixtures for:
- Settings with a known admin identity
- Registries backed by fresh in-memory storage
- Database connection management for integration tests
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Generator

import psycopg
import pytest

from equipment_ledger.config import Settings
from equipment_ledger.registries import ComplianceRegistry, EquipmentRegistry, ServiceRegistry
from equipment_ledger.storage.memory import MemoryStorage
from tests.constants import ADMIN


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Database values can be overridden via environment variables in CI.
    """
    return Settings(
        admin_principal=ADMIN,
        storage_backend="memory",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "equipment_ledger"),
        log_level="DEBUG",
    )


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """
    Undo root logging changes made by `build_ledger` or `configure_logging`.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def equipment_registry() -> EquipmentRegistry:
    return EquipmentRegistry(MemoryStorage("equipment-registration"))


@pytest.fixture
def compliance_storage() -> MemoryStorage:
    return MemoryStorage("compliance-tracking")


@pytest.fixture
def compliance_registry(compliance_storage: MemoryStorage) -> ComplianceRegistry:
    return ComplianceRegistry(compliance_storage, admin=ADMIN)


@pytest.fixture
def service_storage() -> MemoryStorage:
    return MemoryStorage("service-scheduling")


@pytest.fixture
def service_registry(service_storage: MemoryStorage) -> ServiceRegistry:
    return ServiceRegistry(service_storage)


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            conn.execute("SELECT 1;").fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_pool(test_dsn: str, db_connection_available: bool) -> Generator[object, None, None]:
    """
    Provide a session-scoped connection pool for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    from psycopg_pool import ConnectionPool

    pool = ConnectionPool(conninfo=test_dsn, min_size=1, max_size=4, open=True)
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture
def unique_namespace() -> str:
    """A namespace no other test has written to."""
    return f"test-{uuid.uuid4().hex[:12]}"
