"""Ports (interfaces) for the ports-and-adapters architecture."""

from gtfs_departures.domain.ports.departure_sink import DepartureSink
from gtfs_departures.domain.ports.realtime_feed_source import RealtimeFeedSource
from gtfs_departures.domain.ports.schedule_store import ScheduleStore

__all__ = [
    "DepartureSink",
    "RealtimeFeedSource",
    "ScheduleStore",
]
