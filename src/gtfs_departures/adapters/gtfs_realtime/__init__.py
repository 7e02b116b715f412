"""Realtime feed adapters."""

from gtfs_departures.adapters.gtfs_realtime.gtfs_rt_feed_source import GtfsRealtimeFeedSource
from gtfs_departures.adapters.gtfs_realtime.polling_delay_feed_source import (
    PollingDelayFeedSource,
)
from gtfs_departures.adapters.gtfs_realtime.trip_update_parser import parse_feed_message

__all__ = ["GtfsRealtimeFeedSource", "PollingDelayFeedSource", "parse_feed_message"]
