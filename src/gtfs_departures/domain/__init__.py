"""Domain layer - core models, ports and errors."""

from gtfs_departures.domain.errors import (
    GtfsDeparturesError,
    RealtimeFeedError,
    ScheduleStoreUnavailableError,
)
from gtfs_departures.domain.models import (
    DepartureEvent,
    Query,
    ResolvedQuery,
    TripUpdate,
)
from gtfs_departures.domain.ports import (
    DepartureSink,
    RealtimeFeedSource,
    ScheduleStore,
)

__all__ = [
    "DepartureEvent",
    "DepartureSink",
    "GtfsDeparturesError",
    "Query",
    "RealtimeFeedError",
    "RealtimeFeedSource",
    "ResolvedQuery",
    "ScheduleStore",
    "ScheduleStoreUnavailableError",
    "TripUpdate",
]
