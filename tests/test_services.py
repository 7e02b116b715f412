"""Tests for query resolution and schedule expansion."""

import asyncio
import os
import time
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from gtfs_departures.application.services import (
    QueryResolver,
    ScheduleExpander,
    parse_clock_time,
)
from gtfs_departures.domain.models import (
    Calendar,
    CalendarFilter,
    Query,
    RouteFilter,
    RouteRef,
    ScheduleSource,
    StopFilter,
    StopRef,
    StopTime,
    StopTimeFilter,
    Trip,
    TripFilter,
)

# 2024-01-02 is a Tuesday
TUESDAY_MORNING = datetime(2024, 1, 2, 8, 0, tzinfo=UTC)


class MockScheduleStore:
    """In-memory schedule store for testing.

    Every lookup yields to the event loop once and records how many lookups
    were in flight at the same time.
    """

    def __init__(
        self,
        routes: list[RouteRef] | None = None,
        stops_by_route: dict[str, list[StopRef]] | None = None,
        trips: list[Trip] | None = None,
        calendars: list[Calendar] | None = None,
        stop_times: list[StopTime] | None = None,
    ) -> None:
        """Initialize with the schedule data to serve."""
        self.routes = routes or []
        self.stops_by_route = stops_by_route or {}
        self.trips = trips or []
        self.calendars = calendars or []
        self.stop_times = stop_times or []
        self.imported: list[ScheduleSource] = []
        self.import_error: Exception | None = None
        self.active = 0
        self.max_active = 0
        self.calls = 0

    async def _enter(self) -> None:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0)
        self.active -= 1

    async def import_feed(self, source: ScheduleSource) -> None:
        """Record the import, or raise the configured error."""
        await self._enter()
        if self.import_error is not None:
            raise self.import_error
        self.imported.append(source)

    async def get_routes(self, route_filter: RouteFilter) -> list[RouteRef]:
        """Return the configured routes."""
        await self._enter()
        return [
            r for r in self.routes if route_filter.route_id in (None, r.route_id)
        ]

    async def get_stops(self, stop_filter: StopFilter) -> list[StopRef]:
        """Return the stops of a route."""
        await self._enter()
        if stop_filter.route_id is not None:
            stops = self.stops_by_route.get(stop_filter.route_id, [])
        else:
            stops = [s for stops in self.stops_by_route.values() for s in stops]
        return [s for s in stops if stop_filter.stop_id in (None, s.stop_id)]

    async def get_trips(self, trip_filter: TripFilter) -> list[Trip]:
        """Return trips matching the filter."""
        await self._enter()
        return [
            t
            for t in self.trips
            if trip_filter.route_id in (None, t.route_id)
            and trip_filter.trip_id in (None, t.trip_id)
            and trip_filter.direction in (None, t.direction)
        ]

    async def get_calendars(self, calendar_filter: CalendarFilter) -> list[Calendar]:
        """Return calendars matching the filter."""
        await self._enter()
        return [c for c in self.calendars if calendar_filter.service_id in (None, c.service_id)]

    async def get_stop_times(self, stop_time_filter: StopTimeFilter) -> list[StopTime]:
        """Return stop times matching the filter."""
        await self._enter()
        return [
            st
            for st in self.stop_times
            if stop_time_filter.trip_id in (None, st.trip_id)
            and stop_time_filter.stop_id in (None, st.stop_id)
        ]


@pytest.fixture
def route_49() -> RouteRef:
    """Route 49."""
    return RouteRef(route_id="R49", route_long_name="Crosstown Express", route_short_name="49")


@pytest.fixture
def main_st() -> StopRef:
    """Main St & 3rd stop."""
    return StopRef(stop_id="S1", stop_name="Main St & 3rd")


@pytest.fixture
def network(route_49: RouteRef, main_st: StopRef) -> MockScheduleStore:
    """Two routes sharing the Main St stop."""
    route_7 = RouteRef(route_id="R7", route_long_name="Harbor Line", route_short_name="7")
    elm = StopRef(stop_id="S2", stop_name="Elm Ave")
    oak = StopRef(stop_id="S3", stop_name="Oak Blvd")
    return MockScheduleStore(
        routes=[route_49, route_7],
        stops_by_route={"R49": [main_st, elm], "R7": [main_st, oak]},
    )


class TestQueryResolver:
    """Tests for QueryResolver."""

    @pytest.mark.asyncio
    async def test_when_route_and_stop_match_then_both_are_resolved(
        self, network: MockScheduleStore, route_49: RouteRef, main_st: StopRef
    ) -> None:
        """Given route 49 serving Main St, when resolving both names, then that pair is watched."""
        resolver = QueryResolver(network)

        resolved = await resolver.resolve(Query(route_name="49", stop_name="Main St"))

        assert resolved.routes == frozenset({route_49})
        assert resolved.stops == frozenset({main_st})

    @pytest.mark.asyncio
    async def test_when_only_stop_name_given_then_all_serving_routes_are_kept(
        self, network: MockScheduleStore
    ) -> None:
        """Given two routes serving Main St, when resolving by stop only, then both routes are kept."""
        resolver = QueryResolver(network)

        resolved = await resolver.resolve(Query(stop_name="Main"))

        assert {r.route_id for r in resolved.routes} == {"R49", "R7"}
        assert {s.stop_id for s in resolved.stops} == {"S1"}

    @pytest.mark.asyncio
    async def test_when_route_has_no_matching_stop_then_route_is_dropped(
        self, network: MockScheduleStore
    ) -> None:
        """Given Oak Blvd only on route 7, when resolving by stop, then route 49 is not kept."""
        resolver = QueryResolver(network)

        resolved = await resolver.resolve(Query(stop_name="Oak"))

        assert {r.route_id for r in resolved.routes} == {"R7"}

    @pytest.mark.asyncio
    async def test_when_route_name_matches_long_name_then_route_is_resolved(
        self, network: MockScheduleStore
    ) -> None:
        """Given a long name substring, when resolving, then the route matches."""
        resolver = QueryResolver(network)

        resolved = await resolver.resolve(Query(route_name="Harbor"))

        assert {r.route_id for r in resolved.routes} == {"R7"}
        assert {s.stop_id for s in resolved.stops} == {"S1", "S3"}

    @pytest.mark.asyncio
    async def test_when_names_differ_in_case_then_nothing_matches(
        self, network: MockScheduleStore
    ) -> None:
        """Given a lowercase stop name, when resolving, then matching is case-sensitive."""
        resolver = QueryResolver(network)

        resolved = await resolver.resolve(Query(stop_name="main st"))

        assert resolved.is_empty
        assert resolved.stops == frozenset()
        assert resolved.routes == frozenset()

    @pytest.mark.asyncio
    async def test_when_direction_given_then_it_is_carried_not_applied(
        self, network: MockScheduleStore
    ) -> None:
        """Given a direction, when resolving, then the resolution keeps it for later filtering."""
        resolver = QueryResolver(network)

        resolved = await resolver.resolve(Query(route_name="49", direction=1))

        assert resolved.direction == 1
        assert len(resolved.stops) == 2


class TestParseClockTime:
    """Tests for parse_clock_time."""

    def test_when_hours_exceed_24_then_offset_is_kept(self) -> None:
        """Given 25:10:00, when parsing, then the offset is one day and 70 minutes."""
        assert parse_clock_time("25:10:00") == timedelta(days=1, minutes=70)

    def test_when_single_digit_hour_then_parses(self) -> None:
        """Given 7:05:00, when parsing, then leading zeros are optional."""
        assert parse_clock_time("7:05:00") == timedelta(hours=7, minutes=5)

    @pytest.mark.parametrize("value", ["", "09:15", "ab:cd:ef", "09:75:00", "09:15:00:00"])
    def test_when_malformed_then_raises_value_error(self, value: str) -> None:
        """Given a malformed clock string, when parsing, then ValueError is raised."""
        with pytest.raises(ValueError, match="Invalid GTFS clock time"):
            parse_clock_time(value)


@pytest.fixture
def new_york_local_time() -> Iterator[None]:
    """Run the test with the process's local time set to America/New_York."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = previous
        time.tzset()


class TestScheduleExpander:
    """Tests for ScheduleExpander."""

    @pytest.fixture
    def trip(self) -> Trip:
        """Weekday trip on route 49."""
        return Trip(trip_id="T1", route_id="R49", service_id="WK", direction=1, headsign="Downtown")

    @pytest.mark.asyncio
    async def test_when_calendar_active_both_days_then_two_instants(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given a weekday calendar on Tuesday, when expanding, then Tuesday and Wednesday are produced."""
        store = MockScheduleStore(
            calendars=[Calendar.from_weekdays("WK", "monday", "tuesday", "wednesday")],
            stop_times=[StopTime("T1", "S1", 3, "09:15:00")],
        )
        expander = ScheduleExpander(store, timezone=UTC)

        expanded = await expander.expand(trip, main_st, TUESDAY_MORNING)

        assert [stop_time.stop_sequence for stop_time, _ in expanded] == [3, 3]
        assert [instant for _, instant in expanded] == [
            datetime(2024, 1, 2, 9, 15, tzinfo=UTC),
            datetime(2024, 1, 3, 9, 15, tzinfo=UTC),
        ]

    @pytest.mark.asyncio
    async def test_when_calendar_inactive_tomorrow_then_one_instant(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given a Tuesday-only calendar, when expanding on Tuesday, then only Tuesday is produced."""
        store = MockScheduleStore(
            calendars=[Calendar.from_weekdays("WK", "tuesday")],
            stop_times=[StopTime("T1", "S1", 3, "09:15:00")],
        )

        expanded = await ScheduleExpander(store, timezone=UTC).expand(
            trip, main_st, TUESDAY_MORNING
        )

        assert [instant for _, instant in expanded] == [datetime(2024, 1, 2, 9, 15, tzinfo=UTC)]

    @pytest.mark.asyncio
    async def test_when_clock_time_past_midnight_then_next_calendar_day(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given 25:10:00 on a Tuesday service, when expanding, then the instant is Wednesday 01:10."""
        store = MockScheduleStore(
            calendars=[Calendar.from_weekdays("WK", "tuesday")],
            stop_times=[StopTime("T1", "S1", 3, "25:10:00")],
        )

        expanded = await ScheduleExpander(store, timezone=UTC).expand(
            trip, main_st, TUESDAY_MORNING
        )

        assert [instant for _, instant in expanded] == [datetime(2024, 1, 3, 1, 10, tzinfo=UTC)]

    @pytest.mark.asyncio
    async def test_when_trip_skips_stop_then_nothing_is_produced(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given no stop time at the stop, when expanding, then nothing is produced."""
        store = MockScheduleStore(calendars=[Calendar.from_weekdays("WK", "tuesday")])

        expanded = await ScheduleExpander(store, timezone=UTC).expand(
            trip, main_st, TUESDAY_MORNING
        )

        assert expanded == []

    @pytest.mark.asyncio
    async def test_when_calendar_missing_then_trip_is_pruned(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given an undefined service_id, when expanding, then nothing is produced."""
        store = MockScheduleStore(stop_times=[StopTime("T1", "S1", 3, "09:15:00")])

        expanded = await ScheduleExpander(store, timezone=UTC).expand(
            trip, main_st, TUESDAY_MORNING
        )

        assert expanded == []

    @pytest.mark.asyncio
    async def test_when_lookahead_is_three_days_then_three_instants(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given lookahead_days=3 and a daily calendar, when expanding, then three days are produced."""
        store = MockScheduleStore(
            calendars=[Calendar(service_id="WK", days=(True,) * 7)],
            stop_times=[StopTime("T1", "S1", 3, "09:15:00")],
        )

        expanded = await ScheduleExpander(store, lookahead_days=3, timezone=UTC).expand(
            trip, main_st, TUESDAY_MORNING
        )

        assert [instant.day for _, instant in expanded] == [2, 3, 4]

    def test_when_lookahead_below_one_then_raises(self) -> None:
        """Given lookahead_days=0, when constructing, then ValueError is raised."""
        with pytest.raises(ValueError, match="lookahead_days"):
            ScheduleExpander(MockScheduleStore(), lookahead_days=0)

    @pytest.mark.asyncio
    async def test_when_clock_time_malformed_then_raises(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given a malformed departure time, when expanding, then ValueError is raised."""
        store = MockScheduleStore(
            calendars=[Calendar.from_weekdays("WK", "tuesday")],
            stop_times=[StopTime("T1", "S1", 3, "nine fifteen")],
        )

        with pytest.raises(ValueError):
            await ScheduleExpander(store, timezone=UTC).expand(trip, main_st, TUESDAY_MORNING)

    @pytest.mark.asyncio
    async def test_when_trip_visits_stop_twice_then_both_visits_are_expanded(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given a loop trip serving the stop at sequence 1 and 9, when expanding, then both visits are produced."""
        store = MockScheduleStore(
            calendars=[Calendar.from_weekdays("WK", "tuesday")],
            stop_times=[
                StopTime("T1", "S1", 1, "09:00:00"),
                StopTime("T1", "S2", 5, "09:20:00"),
                StopTime("T1", "S1", 9, "09:40:00"),
            ],
        )

        expanded = await ScheduleExpander(store, timezone=UTC).expand(
            trip, main_st, TUESDAY_MORNING
        )

        assert [(stop_time.stop_sequence, instant) for stop_time, instant in expanded] == [
            (1, datetime(2024, 1, 2, 9, 0, tzinfo=UTC)),
            (9, datetime(2024, 1, 2, 9, 40, tzinfo=UTC)),
        ]

    @pytest.mark.asyncio
    async def test_when_zone_configured_then_service_day_follows_that_zone(
        self, trip: Trip, main_st: StopRef
    ) -> None:
        """Given Berlin time and a UTC now that is already Wednesday in Berlin, when expanding, then Wednesday is the first service day."""
        berlin = ZoneInfo("Europe/Berlin")
        store = MockScheduleStore(
            calendars=[Calendar(service_id="WK", days=(True,) * 7)],
            stop_times=[StopTime("T1", "S1", 3, "09:15:00")],
        )
        now = datetime(2024, 1, 2, 23, 30, tzinfo=UTC)

        expanded = await ScheduleExpander(store, timezone=berlin).expand(trip, main_st, now)

        assert [instant for _, instant in expanded] == [
            datetime(2024, 1, 3, 9, 15, tzinfo=berlin),
            datetime(2024, 1, 4, 9, 15, tzinfo=berlin),
        ]

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("new_york_local_time")
    async def test_when_local_time_crosses_dst_then_each_day_keeps_its_wall_clock(
        self, main_st: StopRef
    ) -> None:
        """Given local time in New York on the eve of the March DST change, when expanding, then both days depart at 09:15 local with their own offsets."""
        weekend_trip = Trip(trip_id="T1", route_id="R49", service_id="WE", direction=1)
        store = MockScheduleStore(
            calendars=[Calendar.from_weekdays("WE", "saturday", "sunday")],
            stop_times=[StopTime("T1", "S1", 3, "09:15:00")],
        )
        saturday_evening = datetime(2026, 3, 7, 20, 0).astimezone()

        expanded = await ScheduleExpander(store).expand(weekend_trip, main_st, saturday_evening)

        instants = [instant for _, instant in expanded]
        assert [(i.day, i.hour, i.minute) for i in instants] == [(7, 9, 15), (8, 9, 15)]
        assert instants[0].utcoffset() == timedelta(hours=-5)
        assert instants[1].utcoffset() == timedelta(hours=-4)
