"""Schedule store port."""

from typing import Protocol

from gtfs_departures.domain.models.calendar import Calendar
from gtfs_departures.domain.models.route_ref import RouteRef
from gtfs_departures.domain.models.schedule_filters import (
    CalendarFilter,
    RouteFilter,
    StopFilter,
    StopTimeFilter,
    TripFilter,
)
from gtfs_departures.domain.models.schedule_source import ScheduleSource
from gtfs_departures.domain.models.stop_ref import StopRef
from gtfs_departures.domain.models.stop_time import StopTime
from gtfs_departures.domain.models.trip import Trip


class ScheduleStore(Protocol):
    """Port for the imported static schedule.

    Implementations need not be safe for concurrent use; callers serialize
    access.
    """

    async def import_feed(self, source: ScheduleSource) -> None:
        """Import (or re-import) the static schedule from a source."""
        ...

    async def get_routes(self, route_filter: RouteFilter) -> list[RouteRef]:
        """Get routes matching the filter."""
        ...

    async def get_stops(self, stop_filter: StopFilter) -> list[StopRef]:
        """Get stops matching the filter."""
        ...

    async def get_trips(self, trip_filter: TripFilter) -> list[Trip]:
        """Get trips matching the filter."""
        ...

    async def get_calendars(self, calendar_filter: CalendarFilter) -> list[Calendar]:
        """Get weekly calendars matching the filter."""
        ...

    async def get_stop_times(self, stop_time_filter: StopTimeFilter) -> list[StopTime]:
        """Get stop times matching the filter."""
        ...
