"""Protocol for the component that runs broadcast cycles."""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gtfs_departures.domain.models.departure_event import DepartureEvent
    from gtfs_departures.domain.models.schedule_source import ScheduleSource


class DepartureBroadcasterProtocol(Protocol):
    """Protocol for triggering broadcasts and schedule re-imports."""

    async def broadcast(self, now: datetime | None = None) -> "list[DepartureEvent]":
        """Run one broadcast cycle."""
        ...

    async def refresh_schedule(self, schedule_source: "ScheduleSource") -> bool:
        """Re-import the static schedule."""
        ...
