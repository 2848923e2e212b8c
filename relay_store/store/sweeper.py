"""
Background expiry sweeper.

The target databases have no native TTL indexes, so expired rows stay on
disk until someone deletes them. Reads already ignore them; the sweeper
reclaims the space by calling delete_expired() on each store at a fixed
interval.

    sweeper = ExpirySweeper(cert_store, key_store, interval=300)
    sweeper.start()
    ...
    await sweeper.stop()
"""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


DEFAULT_SWEEP_INTERVAL = 60.0   # seconds


class ExpirySweeper:
    """Periodically purge expired records from one or more stores.

    A failing sweep is logged and retried at the next interval; it never
    stops the loop.
    """

    def __init__(self, *stores, interval: float = DEFAULT_SWEEP_INTERVAL):
        if interval <= 0:
            raise ValueError(f"Sweep interval must be positive, got {interval!r}")
        self.stores   = stores
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        """Run delete_expired() on every store. Returns the total removed."""
        total = 0
        for store in self.stores:
            try:
                removed = await store.delete_expired()
            except Exception:
                logger.exception(f"Expiry sweep failed for {type(store).__name__}")
                continue
            total += removed or 0
            if removed:
                logger.info(f"Purged {removed} expired records from {type(store).__name__}")
        return total

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await self.sweep_once()
            await asyncio.sleep(self.interval)
