"""Schedule expander service.

Turns a trip's weekly calendar plus a stop's clock time into concrete
instants over the next few days.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo

from gtfs_departures.domain.models.schedule_filters import CalendarFilter, StopTimeFilter
from gtfs_departures.domain.models.stop_ref import StopRef
from gtfs_departures.domain.models.stop_time import StopTime
from gtfs_departures.domain.models.trip import Trip
from gtfs_departures.domain.ports.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


def parse_clock_time(value: str) -> timedelta:
    """Parse a GTFS clock string into an offset from the start of the service day.

    Hours may exceed 23 ("25:10:00" is 01:10 the next morning).

    Raises:
        ValueError: If the string is not H:MM:SS / HH:MM:SS.
    """
    parts = value.strip().split(":")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid GTFS clock time: {value!r}")
    hours, minutes, seconds = (int(part) for part in parts)
    if minutes > 59 or seconds > 59:
        raise ValueError(f"Invalid GTFS clock time: {value!r}")
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


class ScheduleExpander:
    """Expands a (trip, stop) pair into upcoming departure instants."""

    def __init__(
        self,
        schedule_store: ScheduleStore,
        lookahead_days: int = 2,
        timezone: tzinfo | None = None,
    ) -> None:
        """Initialize the expander.

        Args:
            schedule_store: Store to look up stop times and calendars.
            lookahead_days: Number of service days to expand, starting today.
            timezone: Timezone of the schedule's clock times. None means the
                process's local time, with each instant getting the UTC offset
                in effect on its own day.
        """
        if lookahead_days < 1:
            raise ValueError("lookahead_days must be at least 1")
        self._schedule_store = schedule_store
        self.lookahead_days = lookahead_days
        self.timezone = timezone

    async def expand(
        self, trip: Trip, stop: StopRef, now: datetime
    ) -> list[tuple[StopTime, datetime]]:
        """Get the candidate departures of a trip at a stop.

        A trip that visits the stop more than once (loop routes) yields
        candidates for every visit.

        Args:
            trip: The trip to expand.
            stop: The stop the trip should serve.
            now: Current time, anchoring the first service day.

        Returns:
            (stop time, instant) pairs on active service days. Instants may lie
            in the past. Empty if the trip skips the stop or its service_id
            has no calendar.

        Raises:
            ValueError: If a stop time's clock string is malformed.
        """
        stop_times = await self._schedule_store.get_stop_times(
            StopTimeFilter(trip_id=trip.trip_id, stop_id=stop.stop_id)
        )
        if not stop_times:
            return []

        calendars = await self._schedule_store.get_calendars(
            CalendarFilter(service_id=trip.service_id)
        )
        if not calendars:
            logger.debug(
                f"Trip {trip.trip_id} references undefined service_id {trip.service_id}, skipping"
            )
            return []
        calendar = calendars[0]

        today = self._local_date(now)
        service_days = [
            day
            for day in (today + timedelta(days=i) for i in range(self.lookahead_days))
            if calendar.is_active_on(day)
        ]

        candidates: list[tuple[StopTime, datetime]] = []
        for stop_time in stop_times:
            offset = parse_clock_time(stop_time.departure_time)
            for service_day in service_days:
                local = datetime.combine(service_day, time(0)) + offset
                candidates.append((stop_time, self._localize(local)))
        return candidates

    def _local_date(self, now: datetime) -> date:
        if self.timezone is not None:
            return now.astimezone(self.timezone).date()
        return now.astimezone().date()

    def _localize(self, local: datetime) -> datetime:
        if self.timezone is not None:
            return local.replace(tzinfo=self.timezone)
        # Naive datetimes are read as local time, with that day's DST offset
        return local.astimezone()
