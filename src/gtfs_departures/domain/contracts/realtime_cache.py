"""Protocol for the realtime trip update cache."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gtfs_departures.domain.models.trip_update import TripUpdate


class RealtimeCacheProtocol(Protocol):
    """Protocol for caching the latest realtime snapshot by trip ID."""

    def get(self, trip_id: str) -> "TripUpdate | None":
        """Get the trip update for a trip.

        Args:
            trip_id: The trip ID to look up.

        Returns:
            The cached trip update, or None if the snapshot has none.
        """
        ...

    def replace(self, updates: "Iterable[TripUpdate]") -> None:
        """Replace the whole snapshot with new trip updates.

        Args:
            updates: The freshly decoded trip updates.
        """
        ...

    def __len__(self) -> int:
        """Number of trips in the current snapshot."""
        ...
