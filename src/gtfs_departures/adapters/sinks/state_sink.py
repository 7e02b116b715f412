"""Sink keeping the latest departure list in memory."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from gtfs_departures.adapters.sinks.departures_state import DeparturesState
from gtfs_departures.domain.models.departure_event import DepartureEvent
from gtfs_departures.domain.ports.departure_sink import DepartureSink

logger = logging.getLogger(__name__)


class StateSink(DepartureSink):
    """Replaces the held departures with each broadcast."""

    def __init__(self, departures_state: DeparturesState | None = None) -> None:
        """Initialize the state sink.

        Args:
            departures_state: The DeparturesState instance to update.
        """
        self.departures_state = departures_state or DeparturesState()

    async def publish(self, events: list[DepartureEvent]) -> None:
        """Replace the held departures with a new broadcast.

        Args:
            events: The ordered departure list.
        """
        self.departures_state.departures = list(events)
        self.departures_state.last_update = datetime.now(UTC)
        self.departures_state.broadcast_count += 1
        logger.debug(f"Updated departures state: {len(events)} departure(s)")
