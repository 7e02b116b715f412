"""Tests for the GTFS zip schedule store."""

import io
import zipfile
from pathlib import Path

import pytest

from gtfs_departures.adapters.gtfs_static import GtfsIndex, GtfsZipScheduleStore
from gtfs_departures.domain.errors import ScheduleStoreUnavailableError
from gtfs_departures.domain.models import (
    CalendarFilter,
    RouteFilter,
    ScheduleSource,
    StopFilter,
    StopTimeFilter,
    TripFilter,
)

FEED_FILES = {
    "routes.txt": (
        "route_id,agency_id,route_short_name,route_long_name,route_type\n"
        "R49,A,49,Crosstown Express,3\n"
        "R7,A,7,Harbor Line,3\n"
    ),
    "stops.txt": (
        "stop_id,stop_name,stop_lat,stop_lon\n"
        "S1,Main St & 3rd,40.0,-75.0\n"
        "S2,Elm Ave,40.1,-75.1\n"
        "S3,Oak Blvd,40.2,-75.2\n"
    ),
    "trips.txt": (
        "route_id,service_id,trip_id,trip_headsign,direction_id\n"
        "R49,WK,T1,Downtown,1\n"
        "R49,WK,T2,Uptown,0\n"
        "R7,WE,T3,Harbor,\n"
    ),
    "stop_times.txt": (
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
        "T1,09:00:00,09:00:00,S2,1\n"
        "T1,09:15:00,09:15:00,S1,3\n"
        "T2,25:10:00,,S1,2\n"
        "T3,10:00:00,10:00:00,S3,1\n"
        "T3,10:05:00,10:05:00,S1,x\n"
    ),
    "calendar.txt": (
        "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date\n"
        "WK,1,1,1,1,1,0,0,20240101,20241231\n"
        "WE,0,0,0,0,0,1,1,20240101,20241231\n"
    ),
}


def _zip_bytes(files: dict[str, str], prefix: str = "") -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            # Some agencies export with a byte order mark
            archive.writestr(prefix + name, "\ufeff" + content)
    return buffer.getvalue()


@pytest.fixture
def archive_path(tmp_path: Path) -> Path:
    """A GTFS archive on disk."""
    path = tmp_path / "google_transit.zip"
    path.write_bytes(_zip_bytes(FEED_FILES))
    return path


async def _imported_store(archive_path: Path) -> GtfsZipScheduleStore:
    store = GtfsZipScheduleStore()
    await store.import_feed(ScheduleSource(path=str(archive_path)))
    return store


class TestGtfsIndex:
    """Tests for GtfsIndex parsing."""

    def test_when_files_in_subfolder_then_they_are_found(self) -> None:
        """Given an archive with a top-level folder, when parsing, then members are still found."""
        index = GtfsIndex.from_zip_bytes(_zip_bytes(FEED_FILES, prefix="gtfs/"))

        assert set(index.routes) == {"R49", "R7"}

    def test_when_required_file_missing_then_raises(self) -> None:
        """Given no stop_times.txt, when parsing, then ValueError names it."""
        files = {k: v for k, v in FEED_FILES.items() if k != "stop_times.txt"}

        with pytest.raises(ValueError, match="stop_times.txt"):
            GtfsIndex.from_zip_bytes(_zip_bytes(files))

    def test_when_calendar_missing_then_index_has_no_calendars(self) -> None:
        """Given no calendar.txt, when parsing, then calendars are empty."""
        files = {k: v for k, v in FEED_FILES.items() if k != "calendar.txt"}

        index = GtfsIndex.from_zip_bytes(_zip_bytes(files))

        assert index.calendars == {}

    def test_when_direction_blank_then_none(self) -> None:
        """Given a trip without direction_id, when parsing, then its direction is None."""
        index = GtfsIndex.from_zip_bytes(_zip_bytes(FEED_FILES))

        assert index.trips["T3"].direction is None
        assert index.trips["T1"].direction == 1

    def test_when_departure_blank_then_arrival_time_is_used(self) -> None:
        """Given a stop time without departure_time, when parsing, then arrival_time is kept."""
        index = GtfsIndex.from_zip_bytes(_zip_bytes(FEED_FILES))

        assert index.stop_times_by_trip["T2"][0].departure_time == "25:10:00"

    def test_when_sequence_invalid_then_row_is_skipped(self) -> None:
        """Given a non-numeric stop_sequence, when parsing, then that row is dropped."""
        index = GtfsIndex.from_zip_bytes(_zip_bytes(FEED_FILES))

        assert [st.stop_id for st in index.stop_times_by_trip["T3"]] == ["S3"]


class TestGtfsZipScheduleStore:
    """Tests for GtfsZipScheduleStore lookups."""

    @pytest.mark.asyncio
    async def test_when_not_imported_then_lookups_raise(self) -> None:
        """Given no import, when looking up routes, then the store is unavailable."""
        with pytest.raises(ScheduleStoreUnavailableError):
            await GtfsZipScheduleStore().get_routes(RouteFilter())

    @pytest.mark.asyncio
    async def test_when_path_missing_then_import_raises(self, tmp_path: Path) -> None:
        """Given a missing archive, when importing, then ScheduleStoreUnavailableError is raised."""
        store = GtfsZipScheduleStore()

        with pytest.raises(ScheduleStoreUnavailableError, match="not found"):
            await store.import_feed(ScheduleSource(path=str(tmp_path / "missing.zip")))

    @pytest.mark.asyncio
    async def test_when_payload_not_zip_then_import_raises(self, tmp_path: Path) -> None:
        """Given a file that is not a zip, when importing, then ScheduleStoreUnavailableError is raised."""
        path = tmp_path / "bad.zip"
        path.write_text("not a zip")

        with pytest.raises(ScheduleStoreUnavailableError, match="Invalid GTFS archive"):
            await GtfsZipScheduleStore().import_feed(ScheduleSource(path=str(path)))

    @pytest.mark.asyncio
    async def test_get_routes(self, archive_path: Path) -> None:
        """Given an imported feed, when filtering routes by id, then only that route is returned."""
        store = await _imported_store(archive_path)

        routes = await store.get_routes(RouteFilter(route_id="R49"))

        assert [(r.route_short_name, r.route_long_name) for r in routes] == [
            ("49", "Crosstown Express")
        ]
        assert len(await store.get_routes(RouteFilter())) == 2

    @pytest.mark.asyncio
    async def test_get_stops_by_route(self, archive_path: Path) -> None:
        """Given route 49, when getting its stops, then the stops its trips serve are returned."""
        store = await _imported_store(archive_path)

        stops = await store.get_stops(StopFilter(route_id="R49"))

        assert [s.stop_id for s in stops] == ["S1", "S2"]
        assert stops[0].stop_name == "Main St & 3rd"

    @pytest.mark.asyncio
    async def test_get_trips_by_route_and_direction(self, archive_path: Path) -> None:
        """Given route 49, when filtering by direction 0, then only the uptown trip is returned."""
        store = await _imported_store(archive_path)

        trips = await store.get_trips(TripFilter(route_id="R49", direction=0))

        assert [t.trip_id for t in trips] == ["T2"]
        assert trips[0].headsign == "Uptown"

    @pytest.mark.asyncio
    async def test_get_calendars(self, archive_path: Path) -> None:
        """Given the WE service, when getting its calendar, then only weekend days are active."""
        store = await _imported_store(archive_path)

        calendars = await store.get_calendars(CalendarFilter(service_id="WE"))

        assert calendars[0].days == (False, False, False, False, False, True, True)

    @pytest.mark.asyncio
    async def test_get_stop_times_by_trip_and_stop(self, archive_path: Path) -> None:
        """Given trip T1 at stop S1, when getting stop times, then the 09:15 row is returned."""
        store = await _imported_store(archive_path)

        stop_times = await store.get_stop_times(StopTimeFilter(trip_id="T1", stop_id="S1"))

        assert [(st.stop_sequence, st.departure_time) for st in stop_times] == [(3, "09:15:00")]

    @pytest.mark.asyncio
    async def test_when_reimported_then_index_is_replaced(
        self, archive_path: Path, tmp_path: Path
    ) -> None:
        """Given a new archive, when re-importing, then lookups reflect the new data."""
        store = await _imported_store(archive_path)
        files = dict(FEED_FILES)
        files["routes.txt"] = "route_id,route_short_name,route_long_name\nR1,1,Loop\n"
        path = tmp_path / "new.zip"
        path.write_bytes(_zip_bytes(files))

        await store.import_feed(ScheduleSource(path=str(path)))

        assert [r.route_id for r in await store.get_routes(RouteFilter())] == ["R1"]
