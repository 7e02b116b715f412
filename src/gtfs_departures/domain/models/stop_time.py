"""Stop time domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StopTime:
    """When a trip serves a stop.

    ``departure_time`` is a GTFS clock string ("HH:MM:SS") and may exceed
    24:00:00 for trips running past midnight of their service day.
    """

    trip_id: str
    stop_id: str
    stop_sequence: int
    departure_time: str
