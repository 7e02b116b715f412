"""Shared realtime trip update cache implementation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from gtfs_departures.domain.contracts.realtime_cache import RealtimeCacheProtocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gtfs_departures.domain.models.trip_update import TripUpdate

logger = logging.getLogger(__name__)


class SharedRealtimeCache(RealtimeCacheProtocol):
    """In-memory snapshot of the latest trip updates by trip ID.

    ``replace`` builds the new snapshot completely before swapping it in with
    a single assignment, so readers see either the old or the new snapshot.
    """

    def __init__(self) -> None:
        """Initialize the cache."""
        self._snapshot: dict[str, TripUpdate] = {}
        self.last_updated: datetime | None = None

    def get(self, trip_id: str) -> TripUpdate | None:
        """Get the trip update for a trip.

        Args:
            trip_id: The trip ID to look up.

        Returns:
            The cached trip update, or None if the snapshot has none.
        """
        return self._snapshot.get(trip_id)

    def replace(self, updates: Iterable[TripUpdate]) -> None:
        """Replace the whole snapshot with new trip updates.

        If a trip appears more than once, the last update wins.

        Args:
            updates: The freshly decoded trip updates.
        """
        snapshot = {update.trip_id: update for update in updates}
        self._snapshot = snapshot
        self.last_updated = datetime.now(UTC)
        logger.debug(f"Realtime snapshot replaced: {len(snapshot)} trip(s)")

    def __len__(self) -> int:
        """Number of trips in the current snapshot."""
        return len(self._snapshot)
