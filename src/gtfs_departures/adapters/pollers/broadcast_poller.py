"""Poller triggering periodic departure broadcasts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gtfs_departures.adapters.pollers.interval_poller import IntervalPoller

if TYPE_CHECKING:
    from gtfs_departures.domain.contracts.departure_broadcaster import (
        DepartureBroadcasterProtocol,
    )


class BroadcastPoller(IntervalPoller):
    """Runs a broadcast cycle on a timer."""

    name = "broadcast poller"

    def __init__(
        self, engine: DepartureBroadcasterProtocol, interval_seconds: float = 60
    ) -> None:
        """Initialize with the engine to broadcast from."""
        super().__init__(interval_seconds)
        self.engine = engine

    async def _tick(self) -> None:
        await self.engine.broadcast()
