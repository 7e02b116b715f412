"""Poller re-importing the static schedule."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gtfs_departures.adapters.pollers.interval_poller import IntervalPoller

if TYPE_CHECKING:
    from gtfs_departures.domain.contracts.departure_broadcaster import (
        DepartureBroadcasterProtocol,
    )
    from gtfs_departures.domain.models.schedule_source import ScheduleSource


class ScheduleRefreshPoller(IntervalPoller):
    """Re-imports the static schedule every few hours."""

    name = "schedule refresh poller"

    def __init__(
        self,
        engine: DepartureBroadcasterProtocol,
        schedule_source: ScheduleSource,
        refresh_interval_hours: float = 12,
    ) -> None:
        """Initialize with the engine and the schedule source to re-import."""
        super().__init__(refresh_interval_hours * 3600)
        self.engine = engine
        self.schedule_source = schedule_source

    async def _tick(self) -> None:
        await self.engine.refresh_schedule(self.schedule_source)
