"""Query domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Query:
    """A user-declared watch: route name, stop name and optional direction.

    Names are case-sensitive substrings. ``None`` means "don't filter".
    """

    route_name: str | None = None
    stop_name: str | None = None
    direction: int | None = None  # GTFS direction_id, 0 or 1
