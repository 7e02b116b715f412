"""Base class for pollers running a coroutine on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from gtfs_departures.domain.contracts.poller import PollerProtocol

logger = logging.getLogger(__name__)


class IntervalPoller(PollerProtocol, ABC):
    """Runs ``_tick`` every ``interval_seconds`` in a background task."""

    name = "poller"

    def __init__(self, interval_seconds: float, run_immediately: bool = False) -> None:
        """Initialize the poller.

        Args:
            interval_seconds: Seconds to sleep between ticks.
            run_immediately: Tick once before the first sleep.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the poller."""
        if self.is_running:
            logger.warning(f"{self.name} already running")
            return

        self._task = asyncio.create_task(self._poll_loop())
        logger.info(f"Started {self.name} (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the poller."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info(f"{self.name} cancelled")
            logger.info(f"Stopped {self.name}")

    async def _poll_loop(self) -> None:
        """Main polling loop."""
        if self.run_immediately:
            await self._safe_tick()

        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                await self._safe_tick()
        except asyncio.CancelledError:
            logger.info(f"{self.name} cancelled")
            raise

    async def _safe_tick(self) -> None:
        # A failing tick must not end the loop; the next interval retries
        try:
            await self._tick()
        except Exception as e:
            logger.error(f"{self.name} tick failed: {e}", exc_info=True)

    @abstractmethod
    async def _tick(self) -> None:
        """Do one unit of periodic work."""
