"""Stop reference domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StopRef:
    """A stop as returned by the schedule store."""

    stop_id: str
    stop_name: str
