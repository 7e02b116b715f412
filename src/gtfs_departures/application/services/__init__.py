"""Application services."""

from gtfs_departures.application.services.departure_aggregator import (
    DepartureAggregator,
    DepartureCandidate,
    collation_key,
)
from gtfs_departures.application.services.departure_engine import DepartureEngine
from gtfs_departures.application.services.query_resolver import QueryResolver
from gtfs_departures.application.services.realtime_matcher import (
    MAX_CREDIBLE_DERIVED_DELAY_SECONDS,
    RealtimeMatcher,
)
from gtfs_departures.application.services.schedule_expander import (
    ScheduleExpander,
    parse_clock_time,
)

__all__ = [
    "MAX_CREDIBLE_DERIVED_DELAY_SECONDS",
    "DepartureAggregator",
    "DepartureCandidate",
    "DepartureEngine",
    "QueryResolver",
    "RealtimeMatcher",
    "ScheduleExpander",
    "collation_key",
    "parse_clock_time",
]
