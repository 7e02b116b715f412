"""Trip domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Trip:
    """One scheduled run of a route."""

    trip_id: str
    route_id: str
    service_id: str
    direction: int | None = None
    headsign: str = ""  # Rider-facing terminus label
