"""Tests for the background expiry sweeper."""

import asyncio
import logging

import pytest
from unittest.mock import AsyncMock

from relay_store.store.memory import MemoryCertificateStore
from relay_store.store.sweeper import ExpirySweeper


def _mock_store(removed: int = 0, fail: bool = False):
    store = AsyncMock()
    if fail:
        store.delete_expired = AsyncMock(side_effect=Exception("database unavailable"))
    else:
        store.delete_expired = AsyncMock(return_value=removed)
    return store


class TestSweeperConfig:
    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            ExpirySweeper(interval=0)


@pytest.mark.asyncio
class TestSweepOnce:
    async def test_sums_removed_records(self):
        sweeper = ExpirySweeper(_mock_store(2), _mock_store(3))
        assert await sweeper.sweep_once() == 5

    async def test_failure_logged_and_other_stores_swept(self, caplog):
        healthy = _mock_store(1)
        sweeper = ExpirySweeper(_mock_store(fail=True), healthy)

        with caplog.at_level(logging.ERROR, logger="relay_store.store.sweeper"):
            assert await sweeper.sweep_once() == 1

        healthy.delete_expired.assert_awaited_once()
        assert "Expiry sweep failed" in caplog.text

    async def test_purges_memory_store(self, valid_path, expired_path, issuer_id):
        store = MemoryCertificateStore()
        await store.save(valid_path, issuer_id)
        await store.save(expired_path, issuer_id)

        assert await ExpirySweeper(store).sweep_once() == 1
        assert len(store.records) == 1


@pytest.mark.asyncio
class TestSweeperLifecycle:
    async def test_runs_until_stopped(self):
        store = _mock_store()
        sweeper = ExpirySweeper(store, interval=0.01)

        sweeper.start()
        assert sweeper.running
        await asyncio.sleep(0.05)
        await sweeper.stop()

        assert not sweeper.running
        assert store.delete_expired.await_count >= 2

    async def test_start_is_idempotent(self):
        sweeper = ExpirySweeper(_mock_store(), interval=10)

        sweeper.start()
        task = sweeper._task
        sweeper.start()

        assert sweeper._task is task
        await sweeper.stop()

    async def test_stop_without_start(self):
        await ExpirySweeper(_mock_store()).stop()
