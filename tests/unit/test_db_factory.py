from __future__ import annotations

from typing import List

import pytest
from psycopg_pool import PoolTimeout

from equipment_ledger.infrastructure import db_factory
from equipment_ledger.infrastructure.db_factory import PoolManager, get_sync_pool


class _FakeConnectionPool:
    instances: List["_FakeConnectionPool"] = []
    failures_before_ready = 0

    def __init__(self, conninfo: str, min_size: int, max_size: int, open: bool) -> None:
        self.conninfo = conninfo
        self.min_size = min_size
        self.max_size = max_size
        self.close_calls = 0
        type(self).instances.append(self)

    def wait(self, timeout: float) -> None:
        if len(type(self).instances) <= type(self).failures_before_ready:
            raise PoolTimeout("pool initialization incomplete")

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def fake_pool(monkeypatch):
    _FakeConnectionPool.instances = []
    _FakeConnectionPool.failures_before_ready = 0
    monkeypatch.setattr(db_factory, "ConnectionPool", _FakeConnectionPool)
    monkeypatch.setattr(db_factory._open_pool.retry, "sleep", lambda _seconds: None)
    PoolManager().close_all()
    yield _FakeConnectionPool
    PoolManager().close_all()


def test_pool_manager_is_a_singleton():
    assert PoolManager() is PoolManager()


def test_get_sync_pool_reuses_the_managed_pool(fake_pool):
    first = get_sync_pool(min_size=1, max_size=4)
    second = get_sync_pool(min_size=2, max_size=8)

    assert first is second
    assert first.max_size == 4
    assert first.conninfo.startswith("postgresql://")


def test_pool_open_retries_until_database_is_ready(fake_pool):
    fake_pool.failures_before_ready = 2

    pool = get_sync_pool()

    assert len(fake_pool.instances) == 3
    assert [p.close_calls for p in fake_pool.instances[:2]] == [1, 1]
    assert pool is fake_pool.instances[-1]


def test_pool_open_gives_up_after_three_attempts(fake_pool):
    fake_pool.failures_before_ready = 10

    with pytest.raises(PoolTimeout):
        get_sync_pool()

    assert len(fake_pool.instances) == 3


def test_close_all_releases_the_pool(fake_pool):
    pool = get_sync_pool()

    PoolManager().close_all()

    assert pool.close_calls == 1
    assert get_sync_pool() is not pool
