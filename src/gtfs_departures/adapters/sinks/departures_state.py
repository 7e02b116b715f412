"""Departures state dataclass."""

from dataclasses import dataclass, field
from datetime import datetime

from gtfs_departures.domain.models.departure_event import DepartureEvent


@dataclass
class DeparturesState:
    """Latest broadcast as seen by downstream consumers."""

    departures: list[DepartureEvent] = field(default_factory=list)
    last_update: datetime | None = None
    broadcast_count: int = 0
