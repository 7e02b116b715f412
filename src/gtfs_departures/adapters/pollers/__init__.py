"""Background pollers."""

from gtfs_departures.adapters.pollers.broadcast_poller import BroadcastPoller
from gtfs_departures.adapters.pollers.interval_poller import IntervalPoller
from gtfs_departures.adapters.pollers.realtime_poller import RealtimePoller
from gtfs_departures.adapters.pollers.schedule_refresh_poller import ScheduleRefreshPoller

__all__ = ["BroadcastPoller", "IntervalPoller", "RealtimePoller", "ScheduleRefreshPoller"]
