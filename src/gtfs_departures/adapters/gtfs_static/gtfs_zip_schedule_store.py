"""Schedule store backed by an in-memory index of a GTFS zip archive."""

from __future__ import annotations

import asyncio
import logging
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

import aiohttp

from gtfs_departures.adapters.api_request_logger import log_api_request, log_api_response
from gtfs_departures.adapters.gtfs_static.gtfs_index import GtfsIndex
from gtfs_departures.domain.errors import ScheduleStoreUnavailableError
from gtfs_departures.domain.ports.schedule_store import ScheduleStore

if TYPE_CHECKING:
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

logger = logging.getLogger(__name__)


class GtfsZipScheduleStore(ScheduleStore):
    """Adapter that imports a GTFS zip archive and answers filtered lookups.

    Shapes and the other files the departures engine never reads are not
    parsed.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout_seconds: int = 60,
    ) -> None:
        """Initialize with optional aiohttp session.

        Args:
            session: Session used to download archives from a URL.
            timeout_seconds: Download timeout in seconds.
        """
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._index: GtfsIndex | None = None

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    async def import_feed(self, source: ScheduleSource) -> None:
        """Download or read the archive and swap in a freshly built index.

        Raises:
            ScheduleStoreUnavailableError: If the archive can't be fetched or parsed.
        """
        payload = await self._read_payload(source)
        try:
            index = await asyncio.to_thread(GtfsIndex.from_zip_bytes, payload)
        except (zipfile.BadZipFile, ValueError) as e:
            raise ScheduleStoreUnavailableError(
                f"Invalid GTFS archive from {source.location}: {e}"
            ) from e
        self._index = index

    async def _read_payload(self, source: ScheduleSource) -> bytes:
        if source.url:
            return await self._download(source.url, source.headers)
        if source.path:
            path = Path(source.path)
            if not path.exists():
                raise ScheduleStoreUnavailableError(f"GTFS archive not found: {path}")
            return await asyncio.to_thread(path.read_bytes)
        raise ScheduleStoreUnavailableError("Schedule source has neither url nor path")

    async def _download(self, url: str, headers: dict[str, str]) -> bytes:
        log_api_request("GET", url, headers=headers)
        try:
            if self._session is not None:
                return await self._fetch(self._session, url, headers)
            async with aiohttp.ClientSession() as session:
                return await self._fetch(session, url, headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScheduleStoreUnavailableError(f"Failed to download {url}: {e}") from e

    async def _fetch(
        self, session: aiohttp.ClientSession, url: str, headers: dict[str, str]
    ) -> bytes:
        async with session.get(url, headers=headers, timeout=self._timeout) as response:
            payload = await response.read()
            log_api_response(url, response.status, len(payload))
            if response.status != 200:
                raise ScheduleStoreUnavailableError(
                    f"Schedule download returned status {response.status} ({url})"
                )
            return payload

    def _require_index(self) -> GtfsIndex:
        if self._index is None:
            raise ScheduleStoreUnavailableError("No GTFS schedule imported")
        return self._index

    async def get_routes(self, route_filter: RouteFilter) -> list[RouteRef]:
        """Get routes matching the filter."""
        index = self._require_index()
        if route_filter.route_id is not None:
            route = index.routes.get(route_filter.route_id)
            return [route] if route else []
        return list(index.routes.values())

    async def get_stops(self, stop_filter: StopFilter) -> list[StopRef]:
        """Get stops matching the filter."""
        index = self._require_index()
        if stop_filter.route_id is not None:
            stop_ids = sorted(index.stop_ids_by_route.get(stop_filter.route_id, ()))
        else:
            stop_ids = list(index.stops)
        if stop_filter.stop_id is not None:
            stop_ids = [stop_id for stop_id in stop_ids if stop_id == stop_filter.stop_id]
        return [index.stops[stop_id] for stop_id in stop_ids if stop_id in index.stops]

    async def get_trips(self, trip_filter: TripFilter) -> list[Trip]:
        """Get trips matching the filter."""
        index = self._require_index()
        if trip_filter.trip_id is not None:
            trip = index.trips.get(trip_filter.trip_id)
            candidates = [trip] if trip else []
        elif trip_filter.route_id is not None:
            trip_ids = index.trips_by_route.get(trip_filter.route_id, ())
            candidates = [index.trips[trip_id] for trip_id in trip_ids]
        else:
            candidates = list(index.trips.values())
        return [
            trip
            for trip in candidates
            if (trip_filter.route_id is None or trip.route_id == trip_filter.route_id)
            and (trip_filter.direction is None or trip.direction == trip_filter.direction)
        ]

    async def get_calendars(self, calendar_filter: CalendarFilter) -> list[Calendar]:
        """Get weekly calendars matching the filter."""
        index = self._require_index()
        if calendar_filter.service_id is not None:
            calendar = index.calendars.get(calendar_filter.service_id)
            return [calendar] if calendar else []
        return list(index.calendars.values())

    async def get_stop_times(self, stop_time_filter: StopTimeFilter) -> list[StopTime]:
        """Get stop times matching the filter, ordered by stop sequence."""
        index = self._require_index()
        if stop_time_filter.trip_id is not None:
            candidates = index.stop_times_by_trip.get(stop_time_filter.trip_id, [])
        else:
            candidates = [st for sts in index.stop_times_by_trip.values() for st in sts]
        return [
            st
            for st in candidates
            if stop_time_filter.stop_id is None or st.stop_id == stop_time_filter.stop_id
        ]
