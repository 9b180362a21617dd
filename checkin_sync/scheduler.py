"""Periodic conditional refresh of cached datasets."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Ticks every ``interval`` seconds and refreshes only when the cache is stale.

    ``stop`` cancels future ticks. A refresh already launched by a tick runs to
    completion on its own task.
    """

    def __init__(
        self,
        interval: float,
        is_valid: Callable[[], bool],
        refresh: Callable[[], Awaitable[None]],
        *,
        name: str = "refresh",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = interval
        self._is_valid = is_valid
        self._refresh = refresh
        self._name = name
        self._ticker: Optional[asyncio.Task[None]] = None
        self._inflight: Set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def start(self) -> None:
        self.stop()
        self._ticker = asyncio.get_running_loop().create_task(self._run())
        logger.info("%s scheduler started (every %ss)", self._name, self._interval)

    def stop(self) -> None:
        if self._ticker is None:
            return
        self._ticker.cancel()
        self._ticker = None
        logger.info("%s scheduler stopped", self._name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.tick()

    def tick(self) -> Optional[asyncio.Task[None]]:
        """Launch a refresh if the cache is stale; returns the refresh task, if any."""

        if self._is_valid():
            logger.debug("%s still fresh, skipping", self._name)
            return None
        logger.info("%s stale, refreshing", self._name)
        task = asyncio.get_running_loop().create_task(self._guarded_refresh())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _guarded_refresh(self) -> None:
        try:
            await self._refresh()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("%s refresh failed", self._name)
