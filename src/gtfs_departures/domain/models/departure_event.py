"""Departure event domain model."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class DepartureEvent:
    """One upcoming departure of a trip from a watched stop."""

    stop_id: str
    stop_name: str
    route_id: str
    route_name: str
    trip_id: str
    direction: int | None
    trip_terminus: str
    scheduled_instant: datetime
    delay_seconds: int | None = None  # None = no live tracking, 0 = confirmed on time
    route_short_name: str = ""
    stop_sequence: int | None = None

    @property
    def dedup_key(self) -> str:
        return f"{self.trip_id}@{self.scheduled_instant.isoformat()}"

    @property
    def route_label(self) -> str:
        """Short display identifier, falling back to the route id."""
        return self.route_short_name or self.route_id

    @property
    def has_realtime(self) -> bool:
        return self.delay_seconds is not None

    @property
    def estimated_instant(self) -> datetime:
        """Scheduled instant shifted by the live delay, if there is one."""
        if self.delay_seconds is None:
            return self.scheduled_instant
        return self.scheduled_instant + timedelta(seconds=self.delay_seconds)
