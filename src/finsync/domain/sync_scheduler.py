"""Triggers for draining the sync queue."""

import asyncio
import contextlib
import logging
from typing import Callable, Optional

from finsync.domain.sync_queue import SyncProcessResult, SyncQueue

logger = logging.getLogger(__name__)

SOURCE_TIMER = "timer"
SOURCE_ONLINE = "online"
SOURCE_FALLBACK = "fallback"
SOURCE_MANUAL = "manual"


class SyncScheduler:
    """Drains the sync queue periodically, on reconnect and after failures.

    Each trigger source runs at most one drain at a time; a trigger that
    fires while its previous drain is still running is ignored. The queue
    itself also refuses overlapping passes across sources.
    """

    def __init__(
        self,
        queue: SyncQueue,
        token_provider: Callable[[], Optional[str]],
        interval_seconds: float = 30,
    ):
        """Initialize sync scheduler.

        Args:
            queue: Queue to drain
            token_provider: Returns the current bearer token, or None when signed out
            interval_seconds: Delay between periodic drains
        """
        self.queue = queue
        self.token_provider = token_provider
        self.interval_seconds = interval_seconds
        self._in_flight: set[str] = set()
        self._task: Optional[asyncio.Task] = None

    async def drain(self, source: str = SOURCE_MANUAL) -> Optional[SyncProcessResult]:
        """Run one processing pass on behalf of ``source``.

        Returns:
            The pass result, or None when skipped (no token, or this source
            is already draining)
        """
        if source in self._in_flight:
            logger.debug("Drain from %s already running, skipping", source)
            return None

        token = self.token_provider()
        if not token:
            return None

        self._in_flight.add(source)
        try:
            return await self.queue.process(token)
        finally:
            self._in_flight.discard(source)

    def notify_online(self) -> asyncio.Task:
        """Connectivity came back; drain once in the background."""
        return asyncio.create_task(self.drain(SOURCE_ONLINE))

    @property
    def running(self) -> bool:
        """Whether the periodic timer is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start periodic draining; the first pass runs immediately."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop periodic draining."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            try:
                await self.drain(SOURCE_TIMER)
            except Exception:
                logger.exception("Periodic sync pass failed")
            await asyncio.sleep(self.interval_seconds)
