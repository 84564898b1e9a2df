"""Background task that evicts expired verification records."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from otp_verifier.verification.records import RecordStore, VerificationRecord

logger = logging.getLogger(__name__)


class Reaper:
    """Periodically sweeps a :class:`RecordStore` for expired records.

    Expiry is also enforced lazily on every verification, so the reaper
    only bounds memory held by codes that are never checked.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], float],
        interval: float,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"sweep interval must be positive, got {interval}")
        self._store = store
        self._clock = clock
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._stopping: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="otp-reaper")
        logger.info("Reaper started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        """Signal the sweep loop to exit and wait for it."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        logger.info("Reaper stopped")

    def sweep(self) -> int:
        """Delete every record with ``expires_at <= now``; return how many."""
        evicted: list[str] = []

        def _evict(identity: str, _record: VerificationRecord) -> None:
            self._store.delete(identity)
            evicted.append(identity)

        self._store.for_each_expired(self._clock(), _evict)
        if evicted:
            logger.debug("Reaper evicted %d expired record(s)", len(evicted))
        return len(evicted)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                try:
                    self.sweep()
                except Exception:
                    logger.exception("Reaper sweep failed; retrying next interval")
