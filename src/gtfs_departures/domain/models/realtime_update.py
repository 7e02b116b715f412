"""Realtime delay matched to a scheduled stop."""

from dataclasses import dataclass
from enum import Enum


class DelaySource(str, Enum):
    """Where a matched delay came from."""

    EXPLICIT_DELAY = "explicit_delay"
    DERIVED_FROM_TIMESTAMP = "derived_from_timestamp"
    TRIP_LEVEL_FALLBACK = "trip_level_fallback"


@dataclass(frozen=True)
class RealtimeUpdate:
    """Delay applicable to a trip at a given stop sequence."""

    trip_id: str
    stop_sequence: int | None  # None for trip-level fallbacks
    delay_seconds: int
    source: DelaySource
