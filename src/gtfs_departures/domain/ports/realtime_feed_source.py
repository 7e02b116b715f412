"""Realtime feed source port."""

from typing import Protocol

from gtfs_departures.domain.models.trip_update import TripUpdate


class RealtimeFeedSource(Protocol):
    """Port for fetching decoded realtime trip updates."""

    async def fetch(self) -> list[TripUpdate]:
        """Fetch the current trip updates.

        Raises:
            RealtimeFeedError: If the feed cannot be fetched or decoded.
        """
        ...
