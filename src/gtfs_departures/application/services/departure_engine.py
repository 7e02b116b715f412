"""Departure engine: query registration and broadcast cycles."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from gtfs_departures.application.services.departure_aggregator import (
    DepartureAggregator,
    DepartureCandidate,
)
from gtfs_departures.application.services.query_resolver import QueryResolver
from gtfs_departures.application.services.realtime_matcher import RealtimeMatcher
from gtfs_departures.application.services.schedule_expander import ScheduleExpander
from gtfs_departures.domain.errors import ScheduleStoreUnavailableError
from gtfs_departures.domain.models.display_settings import DisplaySettings
from gtfs_departures.domain.models.schedule_filters import TripFilter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gtfs_departures.domain.contracts.realtime_cache import RealtimeCacheProtocol
    from gtfs_departures.domain.models.departure_event import DepartureEvent
    from gtfs_departures.domain.models.query import Query
    from gtfs_departures.domain.models.resolved_query import ResolvedQuery
    from gtfs_departures.domain.models.route_ref import RouteRef
    from gtfs_departures.domain.models.schedule_source import ScheduleSource
    from gtfs_departures.domain.models.stop_ref import StopRef
    from gtfs_departures.domain.models.trip import Trip
    from gtfs_departures.domain.ports.departure_sink import DepartureSink
    from gtfs_departures.domain.ports.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


class DepartureEngine:
    """Resolves watched queries into ordered departure lists.

    Every access to the schedule store goes through one non-reentrant
    ``asyncio.Lock``: the store is not safe for concurrent queries, so new
    cycles wait for the running one instead of overlapping or being dropped.
    """

    def __init__(
        self,
        schedule_store: ScheduleStore,
        display_settings: DisplaySettings | None = None,
        realtime_cache: RealtimeCacheProtocol | None = None,
        sinks: Iterable[DepartureSink] = (),
        timezone: tzinfo | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            schedule_store: The static schedule store.
            display_settings: Sort and time-window settings.
            realtime_cache: Latest realtime snapshot. None disables realtime
                matching altogether.
            sinks: Consumers of each broadcast's departure list.
            timezone: Local timezone of the schedule. Defaults to the
                process's local timezone.
        """
        self.display_settings = display_settings or DisplaySettings()
        self._schedule_store = schedule_store
        self._resolver = QueryResolver(schedule_store)
        self._expander = ScheduleExpander(
            schedule_store,
            lookahead_days=self.display_settings.lookahead_days,
            timezone=timezone,
        )
        self._matcher = RealtimeMatcher(realtime_cache)
        self._aggregator = DepartureAggregator(self.display_settings)
        self._sinks = list(sinks)
        self._timezone = timezone
        self._gate = asyncio.Lock()
        self._ready = asyncio.Event()
        self._watch: tuple[ResolvedQuery, ...] = ()
        self.last_events: list[DepartureEvent] = []
        self.last_broadcast: datetime | None = None

    @property
    def watched_queries(self) -> tuple[ResolvedQuery, ...]:
        return self._watch

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def add_sink(self, sink: DepartureSink) -> None:
        self._sinks.append(sink)

    async def wait_ready(self) -> None:
        """Wait until the initial schedule import has finished."""
        await self._ready.wait()

    async def start(self, schedule_source: ScheduleSource) -> None:
        """Import the static schedule once and mark the engine ready.

        Calling again after a successful import is a no-op.

        Raises:
            ScheduleStoreUnavailableError: If the import fails.
        """
        async with self._gate:
            if self._ready.is_set():
                return
            logger.info(f"Importing schedule from {schedule_source.location}")
            try:
                await self._schedule_store.import_feed(schedule_source)
            except ScheduleStoreUnavailableError:
                raise
            except Exception as e:
                raise ScheduleStoreUnavailableError(
                    f"Failed to import schedule from {schedule_source.location}: {e}"
                ) from e
            self._ready.set()
            logger.info("Schedule import finished, engine ready")

    async def register(
        self,
        queries: Iterable[Query],
        schedule_source: ScheduleSource | None = None,
    ) -> list[ResolvedQuery]:
        """Register watch queries and broadcast the updated departures.

        Args:
            queries: Queries to add to the watch list.
            schedule_source: Imported first if the engine is not ready yet.

        Returns:
            The resolutions of the newly registered queries.

        Raises:
            ScheduleStoreUnavailableError: If no schedule has been imported
                and none can be.
        """
        if not self.is_ready:
            if schedule_source is None:
                raise ScheduleStoreUnavailableError(
                    "No schedule imported yet and no schedule source given"
                )
            await self.start(schedule_source)

        async with self._gate:
            resolved = [await self._resolver.resolve(query) for query in queries]
            # Replace wholesale so readers never see a half-extended watch list
            self._watch = (*self._watch, *resolved)
            logger.info(f"Watching {len(self._watch)} query(s)")

        await self.broadcast()
        return resolved

    async def refresh_schedule(self, schedule_source: ScheduleSource) -> bool:
        """Re-import the static schedule.

        Failures are logged and the previously imported schedule stays in use.

        Returns:
            True if the re-import succeeded.
        """
        async with self._gate:
            try:
                await self._schedule_store.import_feed(schedule_source)
            except Exception as e:
                logger.error(f"Schedule refresh from {schedule_source.location} failed: {e}")
                return False
            self._ready.set()
            logger.info(f"Schedule refreshed from {schedule_source.location}")
            return True

    async def broadcast(self, now: datetime | None = None) -> list[DepartureEvent]:
        """Run one broadcast cycle and publish the result to all sinks.

        Args:
            now: Evaluation time. Defaults to the current local time.

        Returns:
            The ordered, deduplicated and filtered departures.
        """
        async with self._gate:
            if now is None:
                now = self._now()
            candidates = await self._collect_candidates(self._watch, now)
            events = self._aggregator.aggregate(candidates, now)
            self.last_events = events
            self.last_broadcast = now
            logger.info(f"Publishing {len(events)} departure(s)")
            for sink in self._sinks:
                try:
                    await sink.publish(events)
                except Exception as e:
                    logger.error(f"Departure sink {sink!r} failed: {e}", exc_info=True)
            return events

    def _now(self) -> datetime:
        if self._timezone is not None:
            return datetime.now(self._timezone)
        return datetime.now().astimezone()

    async def _collect_candidates(
        self, watch: tuple[ResolvedQuery, ...], now: datetime
    ) -> list[DepartureCandidate]:
        candidates: list[DepartureCandidate] = []
        trips_by_route: dict[str, list[Trip]] = {}

        for resolved in watch:
            stops = sorted(resolved.stops, key=lambda s: s.stop_id)
            routes = sorted(resolved.routes, key=lambda r: r.route_id)
            for stop in stops:
                for route in routes:
                    trips = await self._trips_for_route(route, trips_by_route)
                    for trip in trips:
                        if resolved.direction is not None and trip.direction != resolved.direction:
                            continue
                        candidates.extend(await self._candidates_for_trip(stop, route, trip, now))
        return candidates

    async def _trips_for_route(
        self, route: RouteRef, trips_by_route: dict[str, list[Trip]]
    ) -> list[Trip]:
        if route.route_id not in trips_by_route:
            trips_by_route[route.route_id] = await self._schedule_store.get_trips(
                TripFilter(route_id=route.route_id)
            )
        return trips_by_route[route.route_id]

    async def _candidates_for_trip(
        self, stop: StopRef, route: RouteRef, trip: Trip, now: datetime
    ) -> list[DepartureCandidate]:
        try:
            expanded = await self._expander.expand(trip, stop, now)
        except ValueError as e:
            logger.warning(f"Dropping trip {trip.trip_id} at stop {stop.stop_id}: {e}")
            return []

        return [
            DepartureCandidate(
                stop=stop,
                route=route,
                trip=trip,
                stop_time=stop_time,
                scheduled_instant=instant,
                realtime=self._matcher.match(trip.trip_id, stop_time.stop_sequence, instant),
            )
            for stop_time, instant in expanded
        ]
