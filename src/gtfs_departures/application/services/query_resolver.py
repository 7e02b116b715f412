"""Query resolver service."""

import logging

from gtfs_departures.domain.models.query import Query
from gtfs_departures.domain.models.resolved_query import ResolvedQuery
from gtfs_departures.domain.models.route_ref import RouteRef
from gtfs_departures.domain.models.schedule_filters import RouteFilter, StopFilter
from gtfs_departures.domain.models.stop_ref import StopRef
from gtfs_departures.domain.ports.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


class QueryResolver:
    """Maps a user query to the concrete stops and routes to watch."""

    def __init__(self, schedule_store: ScheduleStore) -> None:
        """Initialize with a schedule store."""
        self._schedule_store = schedule_store

    async def resolve(self, query: Query) -> ResolvedQuery:
        """Resolve a query against the schedule store.

        A route is kept when the route name is a substring of its id, short
        name or long name, and only if at least one of its stops matches the
        stop name too. Direction is applied later, per trip.

        Args:
            query: The query to resolve.

        Returns:
            The resolved query. Its sets are empty if nothing matched.
        """
        stops: set[StopRef] = set()
        routes: set[RouteRef] = set()

        for route in await self._schedule_store.get_routes(RouteFilter()):
            if not self._route_matches(route, query.route_name):
                continue

            route_stops = await self._schedule_store.get_stops(StopFilter(route_id=route.route_id))
            matching_stops = [
                stop for stop in route_stops if self._stop_matches(stop, query.stop_name)
            ]
            if not matching_stops:
                continue

            routes.add(route)
            stops.update(matching_stops)

        resolved = ResolvedQuery(query=query, stops=frozenset(stops), routes=frozenset(routes))
        if resolved.is_empty:
            logger.info(f"Query {query} matched no stops/routes")
        else:
            logger.info(
                f"Resolved {query} to {len(resolved.stops)} stop(s) "
                f"and {len(resolved.routes)} route(s)"
            )
        return resolved

    @staticmethod
    def _route_matches(route: RouteRef, route_name: str | None) -> bool:
        if route_name is None:
            return True
        return (
            route_name in route.route_id
            or route_name in route.route_short_name
            or route_name in route.route_long_name
        )

    @staticmethod
    def _stop_matches(stop: StopRef, stop_name: str | None) -> bool:
        return stop_name is None or stop_name in stop.stop_name
