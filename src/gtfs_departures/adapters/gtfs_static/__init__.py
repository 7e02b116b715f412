"""Static GTFS schedule adapters."""

from gtfs_departures.adapters.gtfs_static.gtfs_index import GtfsIndex
from gtfs_departures.adapters.gtfs_static.gtfs_zip_schedule_store import GtfsZipScheduleStore

__all__ = ["GtfsIndex", "GtfsZipScheduleStore"]
