"""Domain models for GTFS departures."""

from gtfs_departures.domain.models.calendar import Calendar
from gtfs_departures.domain.models.departure_event import DepartureEvent
from gtfs_departures.domain.models.display_settings import DisplaySettings, RealtimeMode, SortMode
from gtfs_departures.domain.models.error_details import ErrorDetails
from gtfs_departures.domain.models.query import Query
from gtfs_departures.domain.models.realtime_update import DelaySource, RealtimeUpdate
from gtfs_departures.domain.models.resolved_query import ResolvedQuery
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
from gtfs_departures.domain.models.trip_update import StopTimeEvent, StopTimeUpdate, TripUpdate

__all__ = [
    "Calendar",
    "CalendarFilter",
    "DelaySource",
    "DepartureEvent",
    "DisplaySettings",
    "ErrorDetails",
    "Query",
    "RealtimeMode",
    "RealtimeUpdate",
    "ResolvedQuery",
    "RouteFilter",
    "RouteRef",
    "ScheduleSource",
    "SortMode",
    "StopFilter",
    "StopRef",
    "StopTime",
    "StopTimeEvent",
    "StopTimeFilter",
    "StopTimeUpdate",
    "Trip",
    "TripFilter",
    "TripUpdate",
]
