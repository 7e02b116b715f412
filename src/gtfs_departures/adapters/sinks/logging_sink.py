"""Sink writing each broadcast to the log."""

from __future__ import annotations

import logging

from gtfs_departures.domain.models.departure_event import DepartureEvent
from gtfs_departures.domain.ports.departure_sink import DepartureSink

logger = logging.getLogger(__name__)


def format_departure(event: DepartureEvent) -> str:
    """Format one departure as a single log line."""
    line = (
        f"{event.stop_name} | {event.route_label} -> {event.trip_terminus} "
        f"| {event.scheduled_instant:%a %H:%M}"
    )
    if event.delay_seconds is not None:
        minutes = round(event.delay_seconds / 60)
        line += f" ({minutes:+d} min)"
    return line


class LoggingDepartureSink(DepartureSink):
    """Logs a summary of every broadcast, and each departure at DEBUG."""

    def __init__(self, max_lines: int = 50) -> None:
        """Initialize with the maximum number of departures logged per broadcast."""
        self.max_lines = max_lines

    async def publish(self, events: list[DepartureEvent]) -> None:
        """Log the departure list."""
        tracked = sum(1 for event in events if event.has_realtime)
        logger.info(f"Broadcast: {len(events)} departure(s), {tracked} with live tracking")
        if not logger.isEnabledFor(logging.DEBUG):
            return
        for event in events[: self.max_lines]:
            logger.debug(format_departure(event))
