"""Departure sink port."""

from typing import Protocol

from gtfs_departures.domain.models.departure_event import DepartureEvent


class DepartureSink(Protocol):
    """Port for consumers of broadcast departure lists."""

    async def publish(self, events: list[DepartureEvent]) -> None:
        """Receive the complete, ordered departure list of one broadcast cycle.

        Each call supersedes the previous one in full.
        """
        ...
