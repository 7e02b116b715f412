"""Contracts (protocols) shared between application and adapters."""

from gtfs_departures.domain.contracts.departure_broadcaster import DepartureBroadcasterProtocol
from gtfs_departures.domain.contracts.poller import PollerProtocol
from gtfs_departures.domain.contracts.realtime_cache import RealtimeCacheProtocol

__all__ = ["DepartureBroadcasterProtocol", "PollerProtocol", "RealtimeCacheProtocol"]
