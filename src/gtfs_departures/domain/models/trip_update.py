"""Decoded realtime trip update entities."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StopTimeEvent:
    """Arrival or departure prediction for one stop.

    Either field may be missing; a feed can publish an explicit delay, an
    absolute epoch timestamp, or both.
    """

    delay: int | None = None  # Seconds, signed
    time: int | None = None  # POSIX timestamp


@dataclass(frozen=True)
class StopTimeUpdate:
    """Realtime prediction for one stop of a trip.

    Applies to its own stop and all following stops until superseded.
    """

    stop_sequence: int | None
    arrival: StopTimeEvent | None = None
    departure: StopTimeEvent | None = None


@dataclass(frozen=True)
class TripUpdate:
    """Realtime predictions for one trip."""

    trip_id: str
    stop_time_updates: tuple[StopTimeUpdate, ...] = field(default_factory=tuple)
    delay: int | None = None  # Trip-level aggregate delay in seconds
