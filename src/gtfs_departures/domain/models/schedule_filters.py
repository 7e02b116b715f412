"""Typed field-equality filters for schedule store lookups.

A ``None`` field does not constrain the lookup.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteFilter:
    route_id: str | None = None


@dataclass(frozen=True)
class StopFilter:
    stop_id: str | None = None
    route_id: str | None = None  # Stops served by any trip of this route


@dataclass(frozen=True)
class TripFilter:
    trip_id: str | None = None
    route_id: str | None = None
    direction: int | None = None


@dataclass(frozen=True)
class CalendarFilter:
    service_id: str | None = None


@dataclass(frozen=True)
class StopTimeFilter:
    trip_id: str | None = None
    stop_id: str | None = None
