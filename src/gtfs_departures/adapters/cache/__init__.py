"""Cache adapters."""

from gtfs_departures.adapters.cache.shared_realtime_cache import SharedRealtimeCache

__all__ = ["SharedRealtimeCache"]
